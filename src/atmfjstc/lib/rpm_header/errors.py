"""
The failure vocabulary shared by all the decoders in this package.

All failures are reported as a single exception class, `RPMError`, whose `kind` (and, for data errors, `file_error`)
tells what went wrong. This mirrors the taxonomy used by rpm itself (see ``rpmfilesErrorCodes``) so that callers which
also validate the payload can report their own failures in the same terms.
"""

from enum import Enum
from typing import Optional


class RPMErrorKind(Enum):
    IO = 'io'
    FILE = 'file'
    INCOMPLETE = 'incomplete'
    INTERNAL = 'internal'


class RPMFileError(Enum):
    BAD_MAGIC = 'bad magic'
    BAD_HEADER = 'bad header'
    HEADER_SIZE = 'header size'
    UNKNOWN_FILETYPE = 'unknown filetype'
    MISSING_FILE = 'missing file'
    DIGEST_MISMATCH = 'digest mismatch'
    UNMAPPED_FILE = 'unmapped file'
    FILE_SIZE = 'file size'
    INTERNAL = 'internal error'

    @property
    def description(self) -> str:
        return _FILE_ERROR_DESCRIPTIONS[self]


_FILE_ERROR_DESCRIPTIONS = {
    RPMFileError.BAD_MAGIC: "Bad RPM file magic",
    RPMFileError.BAD_HEADER: "Bad or unreadable RPM header",
    RPMFileError.HEADER_SIZE: "Header size too big",
    RPMFileError.UNKNOWN_FILETYPE: "Unknown file type",
    RPMFileError.MISSING_FILE: "Missing file(s)",
    RPMFileError.DIGEST_MISMATCH: "Digest mismatch",
    RPMFileError.UNMAPPED_FILE: "Archive file not in header",
    RPMFileError.FILE_SIZE: "File too large for archive",
    RPMFileError.INTERNAL: "Internal error",
}


class RPMError(Exception):
    """
    Raised by every decoder in this package when the input cannot be decoded.

    Attributes:
        kind: The broad category of the failure.
        file_error: For `RPMErrorKind.FILE` failures, the specific problem found in the data.
        needed: For `RPMErrorKind.INCOMPLETE` failures, the total number of bytes (counted from the start of the input
            given to the top-level decoder) that would have to be available for the failing step to succeed.
        position: The offset of the offending field, if known.
        meaning: A short indication of what was being decoded (e.g. "lead name").

    The lower-level error that caused this one, if any, is available both as the standard ``__cause__`` and as the
    `cause` property.

    Use the named constructors (`incomplete`, `file`, `internal`, `from_io_error`) rather than calling the class
    directly.
    """

    kind: RPMErrorKind
    file_error: Optional[RPMFileError]
    needed: Optional[int]
    position: Optional[int]
    meaning: Optional[str]

    def __init__(
        self, kind: RPMErrorKind, detail: Optional[str] = None, file_error: Optional[RPMFileError] = None,
        needed: Optional[int] = None, position: Optional[int] = None, meaning: Optional[str] = None
    ):
        if (kind == RPMErrorKind.FILE) != (file_error is not None):
            raise ValueError("file_error must be given for, and only for, FILE errors")
        if (kind == RPMErrorKind.INCOMPLETE) and (needed is None):
            raise ValueError("INCOMPLETE errors must specify the number of bytes needed")

        self.kind = kind
        self.file_error = file_error
        self.needed = needed
        self.position = position
        self.meaning = meaning

        super().__init__(_format_message(kind, detail, file_error, needed, position, meaning))

    @classmethod
    def incomplete(cls, needed: int, position: Optional[int] = None, meaning: Optional[str] = None) -> 'RPMError':
        return cls(RPMErrorKind.INCOMPLETE, needed=needed, position=position, meaning=meaning)

    @classmethod
    def file(
        cls, file_error: RPMFileError, detail: Optional[str] = None, position: Optional[int] = None,
        meaning: Optional[str] = None
    ) -> 'RPMError':
        return cls(RPMErrorKind.FILE, detail, file_error=file_error, position=position, meaning=meaning)

    @classmethod
    def internal(cls, detail: Optional[str] = None) -> 'RPMError':
        return cls(RPMErrorKind.INTERNAL, detail)

    @classmethod
    def from_io_error(cls, error: OSError) -> 'RPMError':
        """
        Wraps an error raised by whatever supplied the archive bytes (e.g. a short read from a file).
        """
        result = cls(RPMErrorKind.IO, str(error))
        result.__cause__ = error

        return result

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__

    @property
    def is_incomplete(self) -> bool:
        return self.kind == RPMErrorKind.INCOMPLETE

    def is_file_error(self, file_error: Optional[RPMFileError] = None) -> bool:
        if self.kind != RPMErrorKind.FILE:
            return False

        return (file_error is None) or (self.file_error == file_error)


def _format_message(
    kind: RPMErrorKind, detail: Optional[str], file_error: Optional[RPMFileError], needed: Optional[int],
    position: Optional[int], meaning: Optional[str]
) -> str:
    if kind == RPMErrorKind.IO:
        head = f"IO error: {detail}"
    elif kind == RPMErrorKind.FILE:
        head = f"RPM file error: {file_error.description}"
    elif kind == RPMErrorKind.INCOMPLETE:
        head = f"Incomplete data: {needed} bytes needed"
    else:
        head = "Internal error"

    context = []
    if meaning is not None:
        context.append(f"while reading {meaning}")
    if position is not None:
        context.append(f"at position {position}")

    message = head + ''.join(f" {part}" for part in context)

    if (detail is not None) and (kind != RPMErrorKind.IO):
        message += f" ({detail})"

    return message
