from typing import Any, Optional

from library_tracker.errors import ValidationError


class TextValidator:
    """Checks for the free-text fields of books and borrowers."""

    @staticmethod
    def is_blank(text: Optional[str]) -> bool:
        if text is None or not isinstance(text, str):
            return True
        return not text.strip()

    @staticmethod
    def require(text: Optional[str], field_name: str) -> str:
        """Return ``text`` unchanged, or raise ValidationError when it is blank."""
        if TextValidator.is_blank(text):
            raise ValidationError(f"{field_name} cannot be null or empty.")
        return text


class QuantityValidator:

    @staticmethod
    def is_integer(value: Any) -> bool:
        # bool is an int subclass; True must not count as one copy
        return isinstance(value, int) and not isinstance(value, bool)

    @staticmethod
    def require_positive(value: Any, field_name: str = "Quantity") -> int:
        if not QuantityValidator.is_integer(value) or value <= 0:
            raise ValidationError(f"{field_name} must be a positive integer.")
        return value

    @staticmethod
    def require_non_negative(value: Any, field_name: str) -> int:
        if not QuantityValidator.is_integer(value) or value < 0:
            raise ValidationError(f"{field_name} must be a non-negative integer.")
        return value
