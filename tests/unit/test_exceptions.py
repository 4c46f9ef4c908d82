"""Tests for custom exception hierarchy."""

import pytest

from offwiki.utils.exceptions import (
    ArchiveReadError,
    CodecError,
    ConfigurationError,
    IndexParseError,
    LookupMiss,
    MarkupParseWarning,
    OffwikiError,
    StructuralParseError,
    TextDecodeError,
    UndeterminedBlockLength,
)


def test_base_exception_message() -> None:
    """Test that base exception stores message."""
    error = OffwikiError("test error")

    assert str(error) == "test error"
    assert error.message == "test error"
    assert error.is_retryable is False


def test_base_exception_retryable() -> None:
    """Test that base exception can be marked as retryable."""
    error = OffwikiError("test error", is_retryable=True)

    assert error.is_retryable is True


@pytest.mark.parametrize(
    "error_class",
    [
        ConfigurationError,
        LookupMiss,
        UndeterminedBlockLength,
        ArchiveReadError,
        CodecError,
        TextDecodeError,
        StructuralParseError,
    ],
)
def test_error_inheritance(error_class: type[OffwikiError]) -> None:
    """Test that every error kind inherits from the base exception."""
    error = error_class("failure")

    assert isinstance(error, OffwikiError)
    assert str(error) == "failure"
    assert error.is_retryable is False


def test_index_parse_error_line_number() -> None:
    """Test that IndexParseError carries the offending line."""
    error = IndexParseError("bad offset", line_number=7)

    assert isinstance(error, OffwikiError)
    assert error.line_number == 7
    assert IndexParseError("bad offset").line_number is None


def test_markup_parse_warning_carries_warnings() -> None:
    """Test that MarkupParseWarning keeps a copy of the parser warnings."""
    warnings = ["unparsed markup in text '[['"]
    error = MarkupParseWarning("1 markup warning(s)", warnings=warnings)
    warnings.append("later")

    assert isinstance(error, OffwikiError)
    assert error.warnings == ["unparsed markup in text '[['"]
    assert MarkupParseWarning("none").warnings == []
