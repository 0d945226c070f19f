"""
Custom exceptions for the Raster Script Composer

Every error raised while interpreting a script is fatal for that run. The
interpreter attaches the 1-based line number before re-raising.
"""

from typing import Optional


class ComposerError(Exception):
    """
    Base class for all script errors.

    Attributes:
        message: Human readable description
        line: 1-based script line, set by the interpreter
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        super().__init__(message)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "line": self.line,
            "message": self.message,
        }


class UnresolvedReferenceError(ComposerError):
    """Raised when a percent measurement has no reference length."""

    def __init__(self, token: str, line: Optional[int] = None):
        self.token = token
        super().__init__(f"Cannot resolve {token!r}: no reference length is defined", line)


class UnknownColorError(ComposerError):
    """Raised when a color is neither a known name nor six hex digits."""

    def __init__(self, spec: str, line: Optional[int] = None):
        self.spec = spec
        super().__init__(f"Unknown color: {spec!r}", line)


class InvalidAlignmentError(ComposerError):
    """Raised for an alignment the current context does not accept."""

    def __init__(self, value, allowed=(), line: Optional[int] = None):
        self.value = value
        self.allowed = tuple(allowed)
        hint = f" (expected one of: {', '.join(self.allowed)})" if self.allowed else ""
        super().__init__(f"Invalid alignment: {value!r}{hint}", line)


class OddCoordinateCountError(ComposerError):
    """Raised when a polygon is missing its last y-coordinate."""

    def __init__(self, count: int, line: Optional[int] = None):
        self.count = count
        super().__init__(f"Polygon needs x/y pairs, got {count} coordinates", line)


class UnknownDirectiveError(ComposerError):
    """Raised for a command keyword the interpreter does not know."""

    def __init__(self, keyword: str, message: str = None, line: Optional[int] = None):
        self.keyword = keyword
        super().__init__(message or f"Unknown command: {keyword!r}", line)


class UnknownOptionError(UnknownDirectiveError):
    """Raised for an option key the command does not accept."""

    def __init__(self, keyword: str, option: str, line: Optional[int] = None):
        self.option = option
        super().__init__(keyword, f"Unknown option {option!r} for {keyword!r}", line)


class MissingFileError(ComposerError):
    """Raised when a referenced file does not exist."""

    def __init__(self, path, message: str = None, line: Optional[int] = None):
        self.path = str(path)
        super().__init__(message or f"Can't find file {self.path}", line)


class FontNotFoundError(MissingFileError):
    """Raised when no TTF/OTF file matches a font name."""

    def __init__(self, name: str, line: Optional[int] = None):
        self.name = name
        super().__init__(name, f"Can't find font file for {name!r}", line)


class UnsupportedImageFormatError(ComposerError):
    """Raised when an input image is not JPEG or PNG."""

    def __init__(self, path, line: Optional[int] = None):
        self.path = str(path)
        super().__init__(f"Don't know how to open {self.path} (JPEG and PNG only)", line)


class UnsupportedOutputFormatError(ComposerError):
    """Raised when the output filename is not .jpg/.jpeg/.png."""

    def __init__(self, path, line: Optional[int] = None):
        self.path = str(path)
        super().__init__(f"Can only save to JPEG and PNG, got {self.path}", line)


class MalformedCommandSyntaxError(ComposerError):
    """Raised for lines or values the parser cannot read."""


class PathOutsideWorkspaceError(ComposerError):
    """Raised when a script names a file outside the directories it may use."""

    def __init__(self, path, line: Optional[int] = None):
        self.path = str(path)
        super().__init__(f"Access to {self.path} is not allowed", line)
