"""Custom exception hierarchy for the application."""


class OffwikiError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, is_retryable: bool = False) -> None:
        """Initialize exception.

        Args:
            message: Error message
            is_retryable: Whether the operation can be retried
        """
        super().__init__(message)
        self.message = message
        self.is_retryable = is_retryable


class ConfigurationError(OffwikiError):
    """Configuration or environment setup error."""

    pass


class IndexParseError(OffwikiError):
    """Malformed line or integer field in the offset index."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


class LookupMiss(OffwikiError):
    """Requested record id or title is absent from the index."""

    pass


class UndeterminedBlockLength(OffwikiError):
    """Record lives in the final block, which is only bounded by end-of-file."""

    pass


class ArchiveReadError(OffwikiError):
    """Open, seek or read failure on the archive."""

    pass


class CodecError(OffwikiError):
    """Corrupt or truncated compressed frame."""

    pass


class TextDecodeError(OffwikiError):
    """Decompressed bytes are not valid UTF-8."""

    pass


class StructuralParseError(OffwikiError):
    """Malformed nested-tag content or unparseable numeric field."""

    pass


class MarkupParseWarning(OffwikiError):
    """The markup parser reported ambiguous or unparsed markup."""

    def __init__(self, message: str, warnings: list[str] | None = None) -> None:
        super().__init__(message)
        self.warnings = list(warnings or [])
