"""
This module contains the `ByteCursor` class, which drives a big-endian `BinaryReader` over an in-memory buffer and
reports its failures as `RPMError`.
"""

from contextlib import contextmanager
from io import BytesIO
from os import SEEK_SET
from typing import Union, Optional

from atmfjstc.lib.binary_utils.BinaryReader import BinaryReader, BinaryReaderMissingDataError, \
    BinaryReaderReadPastEndError, BinaryReaderWrongMagicError, BinaryReaderNullStrReadPastEndError, \
    BinaryReaderNullStrTooLongError

from atmfjstc.lib.rpm_header.errors import RPMError, RPMFileError


BytesLike = Union[bytes, bytearray, memoryview]


class ByteCursor:
    """
    This class reads fields from an in-memory buffer one at a time, from the front.

    Ints, magic literals and strings are read through a `BinaryReader`. Raw byte runs (`read_amount`, `remainder`) are
    instead returned as `memoryview` slices of the original buffer, which must therefore stay alive (and unmodified)
    for as long as the results are in use.

    When a read runs past the end of the buffer, the cursor raises an `RPMError` of the ``INCOMPLETE`` kind whose
    `needed` attribute is the total number of bytes, counted from the start of the buffer, that the read would have
    required. A caller that receives data incrementally can use this to decide how much more to wait for. A failed
    read leaves the cursor where it was.
    """

    _view: memoryview
    _reader: BinaryReader

    def __init__(self, data: BytesLike):
        self._view = _as_byte_view(data)

        # BytesIO shares the memory of a bytes object instead of copying it
        self._reader = BinaryReader(BytesIO(data if isinstance(data, bytes) else self._view), big_endian=True)

    def tell(self) -> int:
        return self._reader.tell()

    def total_size(self) -> int:
        return len(self._view)

    def bytes_remaining(self) -> int:
        return len(self._view) - self.tell()

    def eof(self) -> bool:
        return self.tell() >= len(self._view)

    def remainder(self) -> memoryview:
        """
        Returns a view of all the data that has not yet been consumed. The cursor itself is not advanced.
        """
        return self._view[self.tell():]

    def seek(self, position: int, meaning: Optional[str] = None) -> 'ByteCursor':
        """
        Moves the cursor to an absolute position within the buffer. Seeking exactly to the end is allowed.
        """

        if position < 0:
            raise ValueError("Position cannot be negative")
        if position > len(self._view):
            raise RPMError.incomplete(position, position=self.tell(), meaning=meaning)

        self._reader.seek(position, SEEK_SET)

        return self

    @contextmanager
    def _reading(self):
        original_pos = self.tell()

        try:
            yield
        except (BinaryReaderMissingDataError, BinaryReaderReadPastEndError) as e:
            self._reader.seek(original_pos, SEEK_SET)
            raise RPMError.incomplete(e.position + e.expected_length, position=e.position, meaning=e.meaning) from e
        except BinaryReaderWrongMagicError as e:
            raise RPMError.file(
                RPMFileError.BAD_MAGIC, f"expected 0x{e.expected_magic.hex()}, found 0x{e.found_magic.hex()}",
                position=e.position, meaning=e.meaning,
            ) from e
        except (BinaryReaderNullStrReadPastEndError, BinaryReaderNullStrTooLongError) as e:
            self._reader.seek(original_pos, SEEK_SET)
            raise RPMError.file(RPMFileError.BAD_HEADER, str(e), position=e.position, meaning=e.meaning) from e

    def read_amount(self, n_bytes: int, meaning: Optional[str] = None) -> memoryview:
        """
        Reads exactly `n_bytes` from the buffer, without copying them.

        Returns:
            The data, as a `memoryview` slice of the underlying buffer, `n_bytes` in length.

        Raises:
            RPMError: (INCOMPLETE) If fewer than `n_bytes` remain.
        """

        original_pos = self.tell()

        self.skip_bytes(n_bytes, meaning)

        return self._view[original_pos:original_pos + n_bytes]

    def skip_bytes(self, n_bytes: int, meaning: Optional[str] = None):
        with self._reading():
            self._reader.skip_bytes(n_bytes, meaning)

    def expect_magic(self, magic: bytes, meaning: Optional[str] = None):
        """
        Raises:
            RPMError: (FILE/BAD_MAGIC) If the data does not match the expected sequence. The error's `position` is the
                start of the magic.
            RPMError: (INCOMPLETE) If there are fewer bytes left than the length of the magic.
        """
        with self._reading():
            self._reader.expect_magic(magic, meaning)

    def read_struct(self, struct_format: str, meaning: Optional[str] = None) -> tuple:
        with self._reading():
            return self._reader.read_struct(struct_format, meaning)

    def read_fixed_size_int(self, n_bytes: int, meaning: Optional[str] = None, signed: bool = False) -> int:
        with self._reading():
            return self._reader.read_fixed_size_int(n_bytes, meaning, signed=signed)

    def read_uint8(self, meaning: Optional[str] = None) -> int:
        return self.read_fixed_size_int(1, meaning)

    def read_uint16(self, meaning: Optional[str] = None) -> int:
        return self.read_fixed_size_int(2, meaning)

    def read_int16(self, meaning: Optional[str] = None) -> int:
        return self.read_fixed_size_int(2, meaning, signed=True)

    def read_uint32(self, meaning: Optional[str] = None) -> int:
        return self.read_fixed_size_int(4, meaning)

    def read_uint64(self, meaning: Optional[str] = None) -> int:
        return self.read_fixed_size_int(8, meaning)

    def read_null_terminated_bytes(
        self, meaning: Optional[str] = None, safety_limit: Optional[int] = None, buffer_size: int = 4096
    ) -> bytes:
        """
        Reads a null-terminated byte string, consuming the terminator.

        Raises:
            RPMError: (FILE/BAD_HEADER) If the end of the buffer is reached without finding the null terminator, or the
                string exceeds `safety_limit`.
            RPMError: (INCOMPLETE) If there is no data left at all.
        """
        with self._reading():
            return self._reader.read_null_terminated_bytes(meaning, safety_limit=safety_limit, buffer_size=buffer_size)

    def read_fixed_size_cstr(self, field_size: int, meaning: Optional[str] = None, encoding: str = 'utf-8') -> str:
        """
        Reads a NUL-padded text field of a fixed size.

        The text is everything up to the first NUL in the field; the rest of the field is consumed and discarded.

        Raises:
            RPMError: (INCOMPLETE) If fewer than `field_size` bytes remain.
            RPMError: (FILE/BAD_HEADER) If the field contains no NUL, or the text is not valid in the given encoding.
        """

        meaning = meaning or 'string field'
        original_pos = self.tell()

        field = bytes(self.read_amount(field_size, meaning))

        null_pos = field.find(b'\x00')
        if null_pos == -1:
            raise RPMError.file(
                RPMFileError.BAD_HEADER, f"no null terminator within {field_size} bytes",
                position=original_pos, meaning=meaning,
            )

        return decode_text(field[:null_pos], original_pos, meaning, encoding)


def decode_text(raw: BytesLike, position: int, meaning: Optional[str], encoding: str = 'utf-8') -> str:
    try:
        return bytes(raw).decode(encoding)
    except UnicodeDecodeError as e:
        raise RPMError.file(
            RPMFileError.BAD_HEADER, f"text is not valid {encoding}", position=position, meaning=meaning
        ) from e


def init_cursor(raw_data: Union[BytesLike, ByteCursor]) -> ByteCursor:
    if isinstance(raw_data, ByteCursor):
        return raw_data
    else:
        return ByteCursor(raw_data)


def _as_byte_view(data: BytesLike) -> memoryview:
    if isinstance(data, memoryview):
        return data if (data.format == 'B') and (data.ndim == 1) else data.cast('B')
    if isinstance(data, (bytes, bytearray)):
        return memoryview(data)

    raise TypeError("Input to ByteCursor must be bytes, bytearray or memoryview")
