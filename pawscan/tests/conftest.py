"""
Shared fixtures for scan core tests.

Reusable catalog payloads, domain products, and mocked collaborators.
"""

from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from pawscan.domain.scan.models import (
    EvaluationSubcategory,
    Ingredient,
    Product,
    SafetyStatus,
)
from pawscan.infrastructure.catalog.api_client import CatalogClient
from pawscan.infrastructure.reader.static_reader import StaticCodeReader


# ═══════════════════════════════════════════════════════════
# CATALOG PAYLOAD FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def pet_food_payload() -> dict[str, Any]:
    """Catalog product with five excellent ingredients."""
    names = ["Chicken", "Rice", "Carrots", "Fish Oil", "Vitamins"]
    return {
        "id": "prod-001",
        "name": "Healthy Pet Food",
        "brand": "PetBrand",
        "barcode": "1234567890123",
        "rating": 4,
        "imageUrl": "https://images.example.com/prod-001.jpg",
        "description": "Grain-inclusive adult dry food.",
        "kind": "ingredients",
        "items": [
            {
                "id": f"ing-{i}",
                "name": name,
                "status": "excellent",
                "description": f"{name} is a well tolerated ingredient.",
            }
            for i, name in enumerate(names, start=1)
        ],
    }


@pytest.fixture
def pet_food_envelope(pet_food_payload: dict[str, Any]) -> dict[str, Any]:
    """Found envelope wrapping the pet food payload."""
    return {"data": pet_food_payload}


@pytest.fixture
def chew_toy_payload() -> dict[str, Any]:
    """Non-food catalog product carrying evaluation subcategories."""
    return {
        "id": "prod-002",
        "name": "Rubber Chew Toy",
        "brand": "ToyCo",
        "barcode": "9876543210987",
        "rating": 2.6,
        "imageUrl": None,
        "kind": "evaluation",
        "items": [
            {"id": "ev-1", "name": "Material Safety", "status": "fair", "description": ""},
            {"id": "ev-2", "name": "Durability", "status": "good", "description": ""},
            {"id": "ev-3", "name": "Choking Hazard", "status": "poor", "description": ""},
        ],
    }


# ═══════════════════════════════════════════════════════════
# DOMAIN MODEL FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for ingredient products with the given statuses."""

    def _make(
        *statuses: SafetyStatus,
        barcode: str = "1234567890123",
        name: str = "Healthy Pet Food",
    ) -> Product:
        items = tuple(
            Ingredient(id=f"ing-{i}", name=f"Ingredient {i}", status=status)
            for i, status in enumerate(statuses or (SafetyStatus.EXCELLENT,), start=1)
        )
        return Product(
            id=f"prod-{barcode}",
            name=name,
            brand="PetBrand",
            barcode=barcode,
            rating=4,
            items=items,
        )

    return _make


@pytest.fixture
def sample_product(make_product: Callable[..., Product]) -> Product:
    """Product with mixed statuses."""
    return make_product(SafetyStatus.EXCELLENT, SafetyStatus.GOOD, SafetyStatus.POOR)


@pytest.fixture
def sample_evaluation_product() -> Product:
    """Non-food product with evaluation subcategories."""
    return Product(
        id="prod-002",
        name="Rubber Chew Toy",
        brand="",
        barcode="9876543210987",
        rating=2.6,
        items=(
            EvaluationSubcategory(id="ev-1", name="Material Safety", status=SafetyStatus.FAIR),
            EvaluationSubcategory(id="ev-2", name="Durability", status=SafetyStatus.GOOD),
        ),
    )


# ═══════════════════════════════════════════════════════════
# COLLABORATOR FIXTURES
# ═══════════════════════════════════════════════════════════


@pytest.fixture
def mock_catalog(sample_product: Product) -> AsyncMock:
    """Mock catalog client.

    Default behavior: returns sample_product.
    Override return_value / side_effect in tests.
    """
    client = AsyncMock(spec=CatalogClient)
    client.lookup.return_value = sample_product
    return client


@pytest.fixture
def make_reader() -> Callable[..., StaticCodeReader]:
    """Factory for static code readers."""

    def _make(*codes: str, interval_seconds: float = 0.0) -> StaticCodeReader:
        return StaticCodeReader(list(codes), interval_seconds=interval_seconds)

    return _make


class FakeClock:
    """Clock returning scripted times, then repeating the last one."""

    def __init__(self, *times: float) -> None:
        self.times = list(times) or [0.0]
        self.calls = 0

    def __call__(self) -> float:
        index = min(self.calls, len(self.times) - 1)
        self.calls += 1
        return self.times[index]


@pytest.fixture
def fake_clock() -> Callable[..., FakeClock]:
    """Factory for scripted clocks."""
    return FakeClock
