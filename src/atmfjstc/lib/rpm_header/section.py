"""
Decoding for header sections, the self-describing tag/value structures used for both the Signature and the Header.

Layout (big-endian)::

    magic[3] = 8E AD E8
    version u8
    reserved[4]
    count u32                  number of tag entries
    size u32                   store length in bytes
    tag_entries[count]         16 bytes each: tag u32, type u32, offset u32, count u32
    store[size]                raw bytes referenced by the tag entries

Sections are decoded structurally only: the store is kept as a view into the input and individual values are decoded
on demand via `HeaderSection.value_of`, `HeaderSection.iter_values` or `decode_tag_value`. This matters because some
tags (e.g. file digests) can be large and are not needed for most uses.
"""

from dataclasses import dataclass, field
from typing import Tuple, Union, Optional, Iterator

from atmfjstc.lib.ez_repr import EZRepr, as_is

from atmfjstc.lib.rpm_header.ByteCursor import ByteCursor, BytesLike, init_cursor
from atmfjstc.lib.rpm_header.errors import RPMError, RPMFileError
from atmfjstc.lib.rpm_header.tags import TagEntry, TagValue, tag_type_from_code
from atmfjstc.lib.rpm_header.values import decode_tag_value


SECTION_MAGIC = b'\x8E\xAD\xE8'
SECTION_HEADER_SIZE = 16
SECTION_RESERVED_SIZE = 4
TAG_ENTRY_SIZE = 16

# Same sanity limits rpm applies to header indexes and data
MAX_TAG_COUNT = 0xffff
MAX_STORE_SIZE = 0x0fffffff


@dataclass(frozen=True, repr=False)
class HeaderSectionHeader(EZRepr):
    version: int
    count: int
    size: int


@dataclass(frozen=True, repr=False)
class HeaderSection(EZRepr):
    """
    One complete section: its prologue, the tag entries in on-disk order, and the store they point into.

    The store is a view into the original input buffer, which must outlive the section. It takes part in equality
    comparisons but not in the hash, as views of writable buffers cannot be hashed.
    """

    hdr: HeaderSectionHeader
    tags: Tuple[TagEntry, ...]
    store: memoryview = field(hash=False)

    def __len__(self) -> int:
        return len(self.tags)

    def find_entry(self, tag: int) -> Optional[TagEntry]:
        """
        Returns the first entry for the given tag ID, or None if the section has no such tag.
        """
        for entry in self.tags:
            if entry.tag == tag:
                return entry

        return None

    def value_of(self, tag: int) -> TagValue:
        """
        Decodes the value of the first entry for the given tag ID.

        Raises:
            KeyError: If the section has no such tag.
            RPMError: If the value cannot be decoded.
        """

        entry = self.find_entry(tag)
        if entry is None:
            raise KeyError(tag)

        return decode_tag_value(self.store, entry)

    def iter_values(self) -> Iterator[Tuple[TagEntry, TagValue]]:
        """
        Lazily decodes all values in the section, yielding (entry, value) pairs in table order.
        """
        for entry in self.tags:
            yield entry, decode_tag_value(self.store, entry)

    def _ez_repr_fields(self):
        fields = super()._ez_repr_fields()
        fields['store'] = as_is(f"<{len(self.store)} bytes>")

        return fields


def parse_section_header(raw_data: Union[BytesLike, ByteCursor]) -> Tuple[HeaderSectionHeader, memoryview]:
    """
    Decodes the 16-byte prologue of a section.

    Returns:
        A tuple of the decoded `HeaderSectionHeader` and a view of the data that follows it.

    Raises:
        RPMError: (INCOMPLETE) If the data ends before the prologue does.
        RPMError: (FILE/BAD_MAGIC) If the section magic is wrong.
    """

    cursor = init_cursor(raw_data)

    hdr = read_section_header(cursor)

    return hdr, cursor.remainder()


def read_section_header(cursor: ByteCursor) -> HeaderSectionHeader:
    start_pos = cursor.tell()

    cursor.expect_magic(SECTION_MAGIC, "section magic")

    version = cursor.read_uint8("section version")
    cursor.skip_bytes(SECTION_RESERVED_SIZE, "section reserved area")
    count = cursor.read_uint32("section tag count")
    size = cursor.read_uint32("section store size")

    if cursor.tell() - start_pos != SECTION_HEADER_SIZE:
        raise RPMError.internal(
            f"Section header decoder consumed {cursor.tell() - start_pos} bytes instead of {SECTION_HEADER_SIZE}"
        )

    return HeaderSectionHeader(version=version, count=count, size=size)


def parse_tag_entry(raw_data: Union[BytesLike, ByteCursor]) -> Tuple[TagEntry, memoryview]:
    """
    Decodes a single 16-byte tag entry.

    Raises:
        RPMError: (INCOMPLETE) If the data ends before the entry does.
        RPMError: (FILE/BAD_HEADER) If the type code is unknown. The error's `position` is that of the type field.
    """

    cursor = init_cursor(raw_data)

    entry = read_tag_entry(cursor)

    return entry, cursor.remainder()


def read_tag_entry(cursor: ByteCursor) -> TagEntry:
    start_pos = cursor.tell()

    tag = cursor.read_uint32("tag ID")

    type_pos = cursor.tell()
    tagtype = tag_type_from_code(cursor.read_uint32("tag type"), position=type_pos)

    offset = cursor.read_uint32("tag offset")
    count = cursor.read_uint32("tag count")

    if cursor.tell() - start_pos != TAG_ENTRY_SIZE:
        raise RPMError.internal(
            f"Tag entry decoder consumed {cursor.tell() - start_pos} bytes instead of {TAG_ENTRY_SIZE}"
        )

    return TagEntry(tag=tag, tagtype=tagtype, offset=offset, count=count)


def parse_tag_entries(raw_data: Union[BytesLike, ByteCursor], count: int) -> Tuple[Tuple[TagEntry, ...], memoryview]:
    """
    Decodes an array of exactly `count` tag entries, preserving their order.

    A single bad entry fails the whole array.
    """

    cursor = init_cursor(raw_data)

    entries = read_tag_entries(cursor, count)

    return entries, cursor.remainder()


def read_tag_entries(cursor: ByteCursor, count: int) -> Tuple[TagEntry, ...]:
    if count < 0:
        raise ValueError("Tag count cannot be negative")

    return tuple(read_tag_entry(cursor) for _ in range(count))


def parse_section(
    raw_data: Union[BytesLike, ByteCursor],
    max_tag_count: Optional[int] = MAX_TAG_COUNT, max_store_size: Optional[int] = MAX_STORE_SIZE,
) -> Tuple[HeaderSection, memoryview]:
    """
    Decodes a complete section (prologue, tag entries and store) without decoding any of the values.

    Args:
        raw_data: The data, or a `ByteCursor` positioned at the start of the section (in which case the cursor is
            advanced past it).
        max_tag_count: The maximum number of tag entries accepted. Use None to disable the check.
        max_store_size: The maximum store size accepted, in bytes. Use None to disable the check.

    Returns:
        A tuple of the decoded `HeaderSection` and a view of the data that follows it.

    Raises:
        RPMError: (INCOMPLETE) If the data ends before the section does.
        RPMError: (FILE/BAD_MAGIC) If the section magic is wrong.
        RPMError: (FILE/HEADER_SIZE) If the tag count or store size exceed the given limits.
        RPMError: (FILE/BAD_HEADER) If a tag entry has an unknown type.
    """

    cursor = init_cursor(raw_data)

    section = read_section(cursor, max_tag_count=max_tag_count, max_store_size=max_store_size)

    return section, cursor.remainder()


def read_section(
    cursor: ByteCursor, max_tag_count: Optional[int] = MAX_TAG_COUNT, max_store_size: Optional[int] = MAX_STORE_SIZE,
) -> HeaderSection:
    start_pos = cursor.tell()

    hdr = read_section_header(cursor)

    if (max_tag_count is not None) and (hdr.count > max_tag_count):
        raise RPMError.file(
            RPMFileError.HEADER_SIZE, f"{hdr.count} tags exceed the limit of {max_tag_count}",
            position=start_pos, meaning="section tag count",
        )
    if (max_store_size is not None) and (hdr.size > max_store_size):
        raise RPMError.file(
            RPMFileError.HEADER_SIZE, f"store size of {hdr.size} bytes exceeds the limit of {max_store_size}",
            position=start_pos, meaning="section store size",
        )

    tags = read_tag_entries(cursor, hdr.count)
    store = cursor.read_amount(hdr.size, "section store")

    return HeaderSection(hdr=hdr, tags=tags, store=store)
