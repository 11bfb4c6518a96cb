"""
Scan domain models.

Products resolved from the catalog and the safety evaluation they carry.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pawscan.domain.shared.errors import (
    ConfigurationError,
    DecodeError,
    NotFoundError,
    TransportCause,
    TransportError,
)


class SafetyStatus(str, Enum):
    """Four-tier safety classification, best to worst."""

    EXCELLENT = "excellent"  # Best
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"  # Worst

    @property
    def severity(self) -> int:
        """Rank in the severity order (higher is worse)."""
        return _SEVERITY[self]

    @property
    def label(self) -> str:
        """Human readable label."""
        return self.value.capitalize()

    @property
    def icon(self) -> str:
        """Symbol name shown next to the row."""
        return _ICONS[self]

    @property
    def color(self) -> str:
        """Color name for the status icon."""
        return _COLORS[self]

    @classmethod
    def parse(cls, raw: str) -> SafetyStatus:
        """Parse a wire value, accepting the coarse safe/caution/unsafe names.

        Args:
            raw: Status string from the catalog

        Returns:
            Canonical status

        Raises:
            ValueError: If the value is not a known status

        Example:
            >>> SafetyStatus.parse("caution")
            <SafetyStatus.FAIR: 'fair'>
        """
        value = raw.strip().lower()
        if value in COARSE_STATUS_ALIASES:
            return COARSE_STATUS_ALIASES[value]
        return cls(value)

    @classmethod
    def worst(cls, statuses: list[SafetyStatus]) -> SafetyStatus:
        """Return the most severe status.

        Raises:
            ValueError: If statuses is empty
        """
        if not statuses:
            raise ValueError("Cannot aggregate an empty status list")
        return max(statuses, key=lambda s: s.severity)


_SEVERITY = {
    SafetyStatus.EXCELLENT: 0,
    SafetyStatus.GOOD: 1,
    SafetyStatus.FAIR: 2,
    SafetyStatus.POOR: 3,
}

_ICONS = {
    SafetyStatus.EXCELLENT: "checkmark.circle.fill",
    SafetyStatus.GOOD: "checkmark.circle",
    SafetyStatus.FAIR: "exclamationmark.triangle.fill",
    SafetyStatus.POOR: "xmark.octagon.fill",
}

_COLORS = {
    SafetyStatus.EXCELLENT: "green",
    SafetyStatus.GOOD: "mint",
    SafetyStatus.FAIR: "yellow",
    SafetyStatus.POOR: "red",
}

# Older catalog builds only emit three levels
COARSE_STATUS_ALIASES = {
    "safe": SafetyStatus.EXCELLENT,
    "caution": SafetyStatus.FAIR,
    "unsafe": SafetyStatus.POOR,
}


class ItemKind(str, Enum):
    """Family of evaluation items carried by a product."""

    INGREDIENTS = "ingredients"  # Food: components
    EVALUATION = "evaluation"  # Non-food: evaluation axes


class EvaluatedItem(BaseModel):
    """Common shape of every evaluated row."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Identifier, unique within a product")
    name: str = Field(..., min_length=1, description="Display name")
    status: SafetyStatus = Field(..., description="Safety classification")
    description: str = Field("", description="Explanation shown in the info sheet")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Ensure not whitespace only."""
        if not v.strip():
            raise ValueError("Item name cannot be empty or whitespace")
        return v


class Ingredient(EvaluatedItem):
    """A component of an ingestible product.

    Example:
        >>> chicken = Ingredient(
        ...     id="ing-1",
        ...     name="Chicken",
        ...     status=SafetyStatus.EXCELLENT,
        ...     description="High quality animal protein.",
        ... )
        >>> assert chicken.status.severity == 0
    """


class EvaluationSubcategory(EvaluatedItem):
    """An evaluation axis of a non-ingestible product (e.g. Material Safety)."""


ProductItem = Union[Ingredient, EvaluationSubcategory]


class Product(BaseModel):
    """
    Product resolved from a barcode lookup.

    Carries exactly one family of items, in catalog presentation order.

    Example:
        >>> product = Product(
        ...     id="p-1",
        ...     name="Healthy Pet Food",
        ...     brand="PetBrand",
        ...     barcode="1234567890123",
        ...     rating=4,
        ...     items=(
        ...         Ingredient(id="1", name="Chicken", status=SafetyStatus.EXCELLENT),
        ...         Ingredient(id="2", name="Rice", status=SafetyStatus.GOOD),
        ...     ),
        ... )
        >>> assert product.kind == ItemKind.INGREDIENTS
        >>> assert product.display_name() == "PetBrand - Healthy Pet Food"
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Catalog identifier")
    name: str = Field(..., min_length=1, description="Product name")
    brand: str = Field("", description="Brand name")
    barcode: str = Field(..., min_length=1, description="External identifier")
    rating: float = Field(..., ge=0.0, le=5.0, description="Rating (0-5)")
    image_url: Optional[str] = Field(None, description="Product image URL")
    items: tuple[ProductItem, ...] = Field(..., description="Evaluated items, catalog order")
    description: Optional[str] = Field(None, description="Product description")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Ensure not whitespace only."""
        if not v.strip():
            raise ValueError("Product name cannot be empty or whitespace")
        return v

    @field_validator("items")
    @classmethod
    def validate_items(cls, v: tuple[ProductItem, ...]) -> tuple[ProductItem, ...]:
        """Ensure non-empty, single family, unique ids."""
        if not v:
            raise ValueError("Product must have at least one evaluated item")

        families = {type(item) for item in v}
        if len(families) > 1:
            raise ValueError("Product cannot mix ingredients and evaluation subcategories")

        ids = [item.id for item in v]
        if len(set(ids)) != len(ids):
            raise ValueError("Item ids must be unique within a product")
        return v

    @property
    def kind(self) -> ItemKind:
        """Item family carried by this product."""
        if isinstance(self.items[0], EvaluationSubcategory):
            return ItemKind.EVALUATION
        return ItemKind.INGREDIENTS

    def has_image(self) -> bool:
        """Check if product has an image URL."""
        return self.image_url is not None and len(self.image_url.strip()) > 0

    def has_brand(self) -> bool:
        """Check if product has brand information."""
        return len(self.brand.strip()) > 0

    def display_name(self) -> str:
        """Brand + name if brand exists, otherwise just name."""
        if self.has_brand():
            return f"{self.brand} - {self.name}"
        return self.name

    def paw_rating(self) -> int:
        """Rating rounded to whole paws (0-5)."""
        return int(self.rating + 0.5)


class ScanErrorKind(str, Enum):
    """Category of a failed scan, drives message phrasing."""

    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    DECODE = "decode"
    NOT_FOUND = "not_found"


class ScanError(BaseModel):
    """
    Displayable failure of a scan session.

    Transient: owned by the session that failed.

    Example:
        >>> error = ScanError.from_exception(NotFoundError("0000000000000"))
        >>> assert error.kind == ScanErrorKind.NOT_FOUND
        >>> assert error.barcode == "0000000000000"
    """

    model_config = ConfigDict(frozen=True)

    kind: ScanErrorKind = Field(..., description="Failure category")
    message: str = Field(..., min_length=1, description="Message for display")
    barcode: Optional[str] = Field(None, description="Barcode that was looked up")
    cause: Optional[str] = Field(None, description="Underlying cause tag")

    @classmethod
    def from_exception(cls, exc: Exception, barcode: Optional[str] = None) -> ScanError:
        """Build the displayable error for a catalog failure.

        Args:
            exc: Exception raised by the catalog lookup
            barcode: Barcode being looked up, if known

        Returns:
            ScanError with a user-facing message
        """
        if isinstance(exc, NotFoundError):
            return cls(
                kind=ScanErrorKind.NOT_FOUND,
                message=f"No product found for barcode {exc.barcode}.",
                barcode=exc.barcode,
            )

        if isinstance(exc, TransportError):
            if exc.cause == TransportCause.TIMEOUT:
                message = "The catalog took too long to answer. Please try again."
            else:
                message = "Could not reach the catalog. Please try again."
            return cls(
                kind=ScanErrorKind.TRANSPORT,
                message=message,
                barcode=barcode,
                cause=exc.cause.value,
            )

        if isinstance(exc, DecodeError):
            return cls(
                kind=ScanErrorKind.DECODE,
                message="The catalog returned an unexpected response for this product.",
                barcode=barcode,
                cause=exc.cause,
            )

        if isinstance(exc, ConfigurationError):
            return cls(
                kind=ScanErrorKind.CONFIGURATION,
                message="The scanner is not configured correctly.",
                barcode=barcode,
                cause=str(exc),
            )

        return cls(
            kind=ScanErrorKind.TRANSPORT,
            message="Could not scan product. Please try again.",
            barcode=barcode,
            cause=type(exc).__name__,
        )
