"""
On-demand decoding of tag values out of a section store.

Each value is read with its own cursor over the store, so decoding one value never depends on having decoded another.
Values that run past the end of the store are reported as a malformed header rather than as incomplete data, since the
store itself was already read in full.
"""

from atmfjstc.lib.rpm_header.ByteCursor import ByteCursor, BytesLike, decode_text
from atmfjstc.lib.rpm_header.errors import RPMError, RPMFileError
from atmfjstc.lib.rpm_header.tags import TagEntry, TagType, TagValue


_INT_FORMATS = {
    TagType.INT8: 'B',
    TagType.INT16: 'H',
    TagType.INT32: 'I',
    TagType.INT64: 'Q',
}


def decode_tag_value(store: BytesLike, entry: TagEntry) -> TagValue:
    """
    Decodes the value described by a tag entry.

    The entry's offset is relative to the start of the store. Only the bytes belonging to this entry are examined, so
    values can be decoded independently of each other, in any order, and from several threads at once.

    Args:
        store: The store of the section the entry belongs to.
        entry: The tag entry to decode.

    Returns:
        A `TagValue` of the same type as the entry.

    Raises:
        RPMError: (FILE/BAD_HEADER) If the value extends past the end of the store, a string is not terminated within
            the store, or a string is not valid UTF-8.
    """

    cursor = ByteCursor(store)
    meaning = f"value of tag {entry.tag}"

    try:
        cursor.seek(entry.offset, meaning)

        return TagValue(entry.tagtype, _read_value(cursor, entry, meaning))
    except RPMError as e:
        if not e.is_incomplete:
            raise

        raise RPMError.file(
            RPMFileError.BAD_HEADER,
            f"{entry.tagtype.value} value at offset {entry.offset} (count {entry.count}) exceeds store size "
            f"{cursor.total_size()}",
            position=entry.offset, meaning=meaning,
        ) from e


def _read_value(cursor: ByteCursor, entry: TagEntry, meaning: str):
    count = entry.count
    tag_type = entry.tagtype

    if tag_type == TagType.NULL:
        return ()
    elif tag_type == TagType.CHAR:
        return tuple(chr(byte) for byte in cursor.read_amount(count, meaning))
    elif tag_type in _INT_FORMATS:
        return cursor.read_struct(f'>{count}{_INT_FORMATS[tag_type]}', meaning)
    elif tag_type == TagType.STRING:
        # Every string takes at least its terminator
        if count > cursor.bytes_remaining():
            raise RPMError.file(
                RPMFileError.BAD_HEADER, f"{count} strings cannot fit in {cursor.bytes_remaining()} bytes",
                position=cursor.tell(), meaning=meaning,
            )

        strings = []
        for _ in range(count):
            position = cursor.tell()
            strings.append(decode_text(cursor.read_null_terminated_bytes(meaning), position, meaning))

        return tuple(strings)
    elif tag_type == TagType.BINARY:
        return cursor.read_amount(count, meaning)

    raise RPMError.internal(f"Unhandled tag type {tag_type}")
