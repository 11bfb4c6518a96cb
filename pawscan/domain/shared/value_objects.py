"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Barcode(BaseModel):
    """
    Scanned barcode value object.

    The code reader emits opaque strings, so no symbology is enforced:
    only surrounding whitespace is stripped and empty values rejected.

    Example:
        >>> barcode = Barcode(value=" 1234567890123 ")
        >>> assert barcode.value == "1234567890123"
        >>> assert barcode.is_numeric()
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1, description="Decoded barcode text")

    @field_validator("value")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Ensure not empty or whitespace."""
        if not v.strip():
            raise ValueError("Barcode cannot be empty or whitespace")
        return v.strip()

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)

    def is_numeric(self) -> bool:
        """
        Check for an all-digit code (EAN/UPC family).

        Returns:
            True if every character is a digit
        """
        return self.value.isdigit()

    @classmethod
    def from_string(cls, s: str) -> Barcode:
        """Create from string."""
        return cls(value=s)
