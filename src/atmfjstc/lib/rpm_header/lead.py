"""
Decoding for the Lead, the fixed 96-byte identification block at the start of every RPM archive.

Layout (big-endian)::

    magic[4] = ED AB EE DB
    major u8, minor u8
    rpm_type i16, archnum i16
    name[66]              NUL-padded text
    osnum i16, signature_type i16
    reserved[16]

Modern tools ignore most of the Lead in favor of the header tags, but the name field is still a handy, cheap way to
identify a package.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple, Union

from atmfjstc.lib.ez_repr import EZRepr

from atmfjstc.lib.rpm_header.ByteCursor import ByteCursor, BytesLike, init_cursor
from atmfjstc.lib.rpm_header.errors import RPMError


LEAD_MAGIC = b'\xED\xAB\xEE\xDB'
LEAD_SIZE = 96
LEAD_NAME_SIZE = 66
LEAD_RESERVED_SIZE = 16


class RPMPackageType(IntEnum):
    BINARY = 0
    SOURCE = 1


@dataclass(frozen=True, repr=False)
class Lead(EZRepr):
    major: int
    minor: int
    rpm_type: int
    archnum: int
    name: str
    osnum: int
    signature_type: int

    @property
    def is_source(self) -> bool:
        return self.rpm_type == RPMPackageType.SOURCE

    def __str__(self) -> str:
        kind = 'source' if self.is_source else 'binary'

        return f"{self.name} ({kind} package, RPM format v{self.major}.{self.minor})"


def parse_lead(raw_data: Union[BytesLike, ByteCursor]) -> Tuple[Lead, memoryview]:
    """
    Decodes the Lead at the start of the given data.

    Args:
        raw_data: The archive data, or a `ByteCursor` positioned at the start of the Lead (in which case the cursor is
            advanced past it).

    Returns:
        A tuple of the decoded `Lead` and a view of the data that follows it.

    Raises:
        RPMError: (INCOMPLETE) If the data ends before the Lead does. The `needed` amount reflects the first field that
            could not be read, not the full size of the Lead.
        RPMError: (FILE/BAD_MAGIC) If the data does not start with the Lead magic.
        RPMError: (FILE/BAD_HEADER) If the name field is not NUL-terminated, valid UTF-8 text.
    """

    cursor = init_cursor(raw_data)

    lead = read_lead(cursor)

    return lead, cursor.remainder()


def read_lead(cursor: ByteCursor) -> Lead:
    start_pos = cursor.tell()

    cursor.expect_magic(LEAD_MAGIC, "lead magic")

    major = cursor.read_uint8("lead major version")
    minor = cursor.read_uint8("lead minor version")
    rpm_type = cursor.read_int16("package type")
    archnum = cursor.read_int16("architecture number")
    name = cursor.read_fixed_size_cstr(LEAD_NAME_SIZE, "lead name")
    osnum = cursor.read_int16("OS number")
    signature_type = cursor.read_int16("signature type")
    cursor.skip_bytes(LEAD_RESERVED_SIZE, "lead reserved area")

    if cursor.tell() - start_pos != LEAD_SIZE:
        raise RPMError.internal(f"Lead decoder consumed {cursor.tell() - start_pos} bytes instead of {LEAD_SIZE}")

    return Lead(
        major=major,
        minor=minor,
        rpm_type=rpm_type,
        archnum=archnum,
        name=name,
        osnum=osnum,
        signature_type=signature_type,
    )
