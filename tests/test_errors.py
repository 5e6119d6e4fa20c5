"""Tests for error codes and DocumentError."""

from __future__ import annotations

from docshred.errors import DocumentError, ErrorCode


class TestErrorCode:
    """Test ErrorCode.to_error."""

    def test_default_message(self) -> None:
        """Should use the default message when no detail is given."""
        error = ErrorCode.SHRED_BAD_VECTOR_SIZE.to_error()

        assert error.message == "$vector value can't be empty"
        assert error.error_code is ErrorCode.SHRED_BAD_VECTOR_SIZE

    def test_formatted_detail(self) -> None:
        """Should append formatted detail to the default message."""
        error = ErrorCode.UNSUPPORTED_UPDATE_OPERATION_PARAM.to_error(
            "%s requires %d", "$pop", 1
        )

        assert error.message == "Unsupported update operation parameter: $pop requires 1"

    def test_detail_without_arguments_is_not_formatted(self) -> None:
        """Should leave percent signs alone when there are no arguments."""
        error = ErrorCode.SHRED_DOC_KEY_NAME_VIOLATION.to_error("100% invalid")

        assert error.message == "Document field name invalid: 100% invalid"


class TestDocumentError:
    """Test DocumentError attributes."""

    def test_code_is_enum_name(self) -> None:
        """Should expose the code as the enum member name."""
        error = DocumentError(ErrorCode.SHRED_BAD_DOCID_TYPE)

        assert error.code == "SHRED_BAD_DOCID_TYPE"
        assert str(error) == "Bad type for '_id' property"

    def test_repr(self) -> None:
        """Should include code and message in repr."""
        error = DocumentError(ErrorCode.SHRED_BAD_DOCID_TYPE, "oops")

        assert repr(error) == "DocumentError(SHRED_BAD_DOCID_TYPE, 'oops')"
