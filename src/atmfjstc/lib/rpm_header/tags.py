"""
Tag types, tag descriptors and tag values, as found in the Signature and Header sections.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union, Optional

from atmfjstc.lib.ez_repr import EZRepr, as_is

from atmfjstc.lib.rpm_header.errors import RPMError, RPMFileError


class TagType(Enum):
    NULL = 'null'
    CHAR = 'char'
    INT8 = 'int8'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    STRING = 'string'
    BINARY = 'binary'

    @staticmethod
    def from_code(code: int, position: Optional[int] = None) -> 'TagType':
        return tag_type_from_code(code, position)

    @property
    def element_size(self) -> Optional[int]:
        """
        The size in bytes of one element of this type, or None for variable-size types (strings).
        """
        return _ELEMENT_SIZES[self]


# Codes 8 (string array) and 9 (i18n string) decode exactly like plain strings; 10 and 11 are likewise treated as
# binary blobs.
_TAG_TYPES_BY_CODE = {
    0: TagType.NULL,
    1: TagType.CHAR,
    2: TagType.INT8,
    3: TagType.INT16,
    4: TagType.INT32,
    5: TagType.INT64,
    6: TagType.STRING,
    7: TagType.BINARY,
    8: TagType.STRING,
    9: TagType.STRING,
    10: TagType.BINARY,
    11: TagType.BINARY,
}

_ELEMENT_SIZES = {
    TagType.NULL: 0,
    TagType.CHAR: 1,
    TagType.INT8: 1,
    TagType.INT16: 2,
    TagType.INT32: 4,
    TagType.INT64: 8,
    TagType.STRING: None,
    TagType.BINARY: 1,
}


def tag_type_from_code(code: int, position: Optional[int] = None) -> TagType:
    """
    Maps an on-disk tag type code to a `TagType`.

    Raises:
        RPMError: (FILE/BAD_HEADER) If the code is not one of the 12 known ones. `position`, if given, is reported as
            the location of the offending type field.
    """

    tag_type = _TAG_TYPES_BY_CODE.get(code)

    if tag_type is None:
        raise RPMError.file(
            RPMFileError.BAD_HEADER, f"unknown tag type {code:#x}", position=position, meaning="tag type"
        )

    return tag_type


@dataclass(frozen=True, repr=False)
class TagEntry(EZRepr):
    """
    A descriptor for one value in a section's store.

    For the Binary type, `count` is the length of the value in bytes; for all other types it is the number of
    elements.
    """

    tag: int
    tagtype: TagType
    offset: int
    count: int


TagValueData = Union[Tuple[str, ...], Tuple[int, ...], memoryview]


@dataclass(frozen=True, repr=False)
class TagValue(EZRepr):
    """
    The decoded value of a tag.

    `value` is:

    - An empty tuple, for the Null type
    - A tuple of single-character strings, for the Char type
    - A tuple of unsigned ints, for the Int8 to Int64 types
    - A tuple of strings, for the String type
    - A `memoryview` into the section store, for the Binary type. Use `materialize()` to get an independent copy.

    Values compare and hash by content, so Binary values decoded from a writable buffer are hashable too.
    """

    type: TagType
    value: TagValueData

    def materialize(self) -> Union[tuple, bytes]:
        return bytes(self.value) if isinstance(self.value, memoryview) else self.value

    def __hash__(self):
        return hash((self.type, self.materialize()))

    def _ez_repr_fields(self):
        fields = super()._ez_repr_fields()

        if isinstance(self.value, memoryview):
            fields['value'] = as_is(repr(bytes(self.value)) if len(self.value) <= 32 else f"<{len(self.value)} bytes>")

        return fields
