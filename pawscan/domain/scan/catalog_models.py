"""
Catalog wire models.

Shape of the catalog lookup response before mapping to domain models.
"""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from pawscan.domain.scan.models import ItemKind


class CatalogItemPayload(BaseModel):
    """One evaluated item as sent by the catalog.

    Example:
        >>> item = CatalogItemPayload(
        ...     id="ing-1",
        ...     name="Chicken",
        ...     status="excellent",
        ...     description="High quality protein.",
        ... )
        >>> assert item.status == "excellent"
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Item identifier")
    name: str = Field(..., description="Item name")
    status: str = Field(..., description="Status name (excellent/good/fair/poor)")
    description: str = Field("", description="Item explanation")


class CatalogProductPayload(BaseModel):
    """Product record as sent by the catalog.

    Example:
        >>> payload = CatalogProductPayload.model_validate(
        ...     {
        ...         "id": "p-1",
        ...         "name": "Healthy Pet Food",
        ...         "brand": "PetBrand",
        ...         "barcode": "1234567890123",
        ...         "rating": 4,
        ...         "imageUrl": None,
        ...         "kind": "ingredients",
        ...         "items": [],
        ...     }
        ... )
        >>> assert payload.kind == ItemKind.INGREDIENTS
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Catalog identifier")
    name: str = Field(..., description="Product name")
    brand: str = Field("", description="Brand name")
    barcode: str = Field(..., description="Product barcode")
    rating: Union[StrictInt, StrictFloat] = Field(..., description="Rating, integer or continuous")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="Image URL")
    description: Optional[str] = Field(None, description="Product description")
    kind: ItemKind = Field(..., description="Item family tag")
    items: list[CatalogItemPayload] = Field(..., description="Items in presentation order")


class CatalogEnvelope(BaseModel):
    """Lookup response envelope: {"data": product or null}."""

    model_config = ConfigDict(frozen=True)

    data: Optional[CatalogProductPayload] = Field(..., description="Product (None if not found)")

    def is_found(self) -> bool:
        """Check if the catalog returned a product."""
        return self.data is not None
