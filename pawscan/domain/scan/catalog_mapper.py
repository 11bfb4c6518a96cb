"""
Catalog data mapper.

Transforms catalog lookup responses to domain models.
"""

from typing import Any

import pydantic

from pawscan.domain.scan.catalog_models import (
    CatalogEnvelope,
    CatalogItemPayload,
    CatalogProductPayload,
)
from pawscan.domain.scan.models import (
    EvaluationSubcategory,
    Ingredient,
    ItemKind,
    Product,
    ProductItem,
    SafetyStatus,
)
from pawscan.domain.shared.errors import DecodeError


def _error_location(exc: pydantic.ValidationError) -> str:
    """Dotted path of the first validation failure."""
    errors = exc.errors()
    if not errors:
        return "unknown"
    return ".".join(str(part) for part in errors[0]["loc"]) or "root"


class CatalogMapper:
    """Maps catalog API data to domain models."""

    @staticmethod
    def parse_envelope(response_data: Any) -> CatalogEnvelope:
        """Parse the lookup response envelope.

        Args:
            response_data: Decoded JSON body

        Returns:
            Parsed envelope (data may be None)

        Raises:
            DecodeError: If body is not a {"data": ...} object

        Example:
            >>> envelope = CatalogMapper.parse_envelope({"data": None})
            >>> assert not envelope.is_found()
        """
        if not isinstance(response_data, dict) or "data" not in response_data:
            raise DecodeError("Response is not a catalog envelope", cause="envelope")

        try:
            return CatalogEnvelope.model_validate(response_data)
        except pydantic.ValidationError as e:
            raise DecodeError(
                f"Invalid product payload: {e.errors()[0]['msg']}",
                cause=_error_location(e),
            ) from e

    @staticmethod
    def is_not_found_envelope(response_data: Any) -> bool:
        """Check for the exact {"data": null} not-found envelope."""
        return (
            isinstance(response_data, dict)
            and "data" in response_data
            and response_data["data"] is None
        )

    @staticmethod
    def to_product(payload: CatalogProductPayload) -> Product:
        """Convert catalog payload to a domain Product.

        Args:
            payload: Parsed product payload

        Returns:
            Domain Product with items in catalog order

        Raises:
            DecodeError: If items are empty or fail domain validation

        Example:
            >>> payload = CatalogProductPayload(
            ...     id="p-1",
            ...     name="Healthy Pet Food",
            ...     barcode="1234567890123",
            ...     rating=4,
            ...     kind=ItemKind.INGREDIENTS,
            ...     items=[
            ...         CatalogItemPayload(id="1", name="Chicken", status="excellent"),
            ...     ],
            ... )
            >>> product = CatalogMapper.to_product(payload)
            >>> assert product.items[0].status == SafetyStatus.EXCELLENT
        """
        if not payload.items:
            raise DecodeError(
                f"Product {payload.id} has no evaluation items",
                cause="items",
            )

        items = tuple(
            CatalogMapper._to_item(item, payload.kind, index)
            for index, item in enumerate(payload.items)
        )

        try:
            return Product(
                id=payload.id,
                name=payload.name,
                brand=payload.brand,
                barcode=payload.barcode,
                rating=payload.rating,
                image_url=payload.image_url,
                items=items,
                description=payload.description,
            )
        except pydantic.ValidationError as e:
            raise DecodeError(
                f"Invalid product {payload.id}: {e.errors()[0]['msg']}",
                cause=_error_location(e),
            ) from e

    @staticmethod
    def _to_item(item: CatalogItemPayload, kind: ItemKind, index: int) -> ProductItem:
        """Convert one item, parsing its status strictly."""
        try:
            status = SafetyStatus.parse(item.status)
        except ValueError as e:
            raise DecodeError(
                f"Unknown safety status '{item.status}'",
                cause=f"items.{index}.status",
            ) from e

        model = Ingredient if kind == ItemKind.INGREDIENTS else EvaluationSubcategory
        try:
            return model(
                id=item.id,
                name=item.name,
                status=status,
                description=item.description,
            )
        except pydantic.ValidationError as e:
            raise DecodeError(
                f"Invalid item at position {index}: {e.errors()[0]['msg']}",
                cause=f"items.{index}",
            ) from e
