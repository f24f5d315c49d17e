"""
Decoding for the complete header region of an RPM archive: Lead, Signature section, alignment padding and Header
section, in that order. What follows is the (usually compressed) payload, which is not handled here.
"""

from dataclasses import dataclass
from typing import Tuple, Union, Optional, Iterator

from atmfjstc.lib.ez_repr import EZRepr

from atmfjstc.lib.rpm_header.ByteCursor import ByteCursor, BytesLike, init_cursor
from atmfjstc.lib.rpm_header.lead import Lead, read_lead
from atmfjstc.lib.rpm_header.section import HeaderSection, read_section, MAX_TAG_COUNT, MAX_STORE_SIZE


SECTION_ALIGNMENT = 8


@dataclass(frozen=True, repr=False)
class RPMHeader(EZRepr):
    """
    The decoded header region of an RPM archive.

    `payload_offset` is the position in the input at which the payload starts. The object can also be unpacked as a
    ``(lead, signature, header)`` triple.
    """

    lead: Lead
    signature: HeaderSection
    header: HeaderSection
    payload_offset: int

    def __iter__(self) -> Iterator[Union[Lead, HeaderSection]]:
        return iter((self.lead, self.signature, self.header))


def signature_padding(store_size: int) -> int:
    """
    Returns the number of padding bytes that follow a Signature section with the given store size, so that the Header
    section starts on an 8-byte boundary.
    """
    return (SECTION_ALIGNMENT - store_size % SECTION_ALIGNMENT) % SECTION_ALIGNMENT


def parse_header(
    raw_data: Union[BytesLike, ByteCursor],
    max_tag_count: Optional[int] = MAX_TAG_COUNT, max_store_size: Optional[int] = MAX_STORE_SIZE,
    signature_max_tag_count: Optional[int] = None, signature_max_store_size: Optional[int] = None,
) -> Tuple[RPMHeader, memoryview]:
    """
    Decodes the header region of an RPM archive.

    Args:
        raw_data: The archive data, or a `ByteCursor` positioned at the start of the archive (in which case the cursor
            is advanced to the start of the payload).
        max_tag_count: The maximum number of tag entries accepted in either section. Use None to disable the check.
        max_store_size: The maximum store size accepted in either section, in bytes. Use None to disable the check.
        signature_max_tag_count: If not None, overrides `max_tag_count` for the Signature section. Unlike the general
            limits, None here does not disable the check but means "same as `max_tag_count`". To lift the
            Signature limit alone, pass an explicit larger value.
        signature_max_store_size: If not None, overrides `max_store_size` for the Signature section. As above, None
            means "same as `max_store_size`".

    Returns:
        A tuple of the decoded `RPMHeader` and a view of the data that follows it, i.e. the payload.

    Raises:
        RPMError: (INCOMPLETE) If the data ends before the header region does. The `needed` amount is counted from the
            start of the Lead.
        RPMError: (FILE/BAD_MAGIC) If the Lead or either section has the wrong magic.
        RPMError: (FILE/HEADER_SIZE) If either section exceeds the given limits.
        RPMError: (FILE/BAD_HEADER) If the Lead name or a tag entry is malformed.
    """

    cursor = init_cursor(raw_data)

    lead = read_lead(cursor)
    signature = read_section(
        cursor,
        max_tag_count=max_tag_count if signature_max_tag_count is None else signature_max_tag_count,
        max_store_size=max_store_size if signature_max_store_size is None else signature_max_store_size,
    )
    cursor.skip_bytes(signature_padding(signature.hdr.size), "signature padding")
    header = read_section(cursor, max_tag_count=max_tag_count, max_store_size=max_store_size)

    return RPMHeader(lead=lead, signature=signature, header=header, payload_offset=cursor.tell()), cursor.remainder()
