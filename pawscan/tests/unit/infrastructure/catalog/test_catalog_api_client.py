"""
Unit tests for the catalog API client.

HTTP is mocked at aiohttp.ClientSession.get.
"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from pawscan.domain.scan.models import SafetyStatus
from pawscan.domain.shared.errors import (
    ConfigurationError,
    DecodeError,
    LookupTimeoutError,
    NotFoundError,
    TransportCause,
    TransportError,
    ValidationError,
)
from pawscan.infrastructure.catalog.api_client import CatalogClient

BASE_URL = "https://catalog.example.com/api/v1"


def _response(status: int = 200, body: Any = None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status = status
    if json_error:
        response.json = AsyncMock(side_effect=ValueError("Expecting value"))
    else:
        response.json = AsyncMock(return_value=body)
    return response


class TestBuildUrl:
    """Test request construction."""

    def test_build_url(self) -> None:
        """Should append products/{barcode}."""
        client = CatalogClient(BASE_URL)

        assert client.build_url("1234567890123") == f"{BASE_URL}/products/1234567890123"

    def test_build_url_trailing_slash(self) -> None:
        """Should not double the slash."""
        client = CatalogClient(BASE_URL + "/")

        assert client.build_url("111") == f"{BASE_URL}/products/111"

    @pytest.mark.parametrize(
        "base_url",
        ["", "catalog.example.com/api", "ftp://catalog.example.com", "http://"],
    )
    def test_invalid_base_url(self, base_url: str) -> None:
        """Should fail fast on malformed configuration."""
        with pytest.raises(ConfigurationError):
            CatalogClient(base_url).build_url("111")

    def test_blank_barcode(self) -> None:
        """Should reject blank barcodes."""
        with pytest.raises(ValidationError):
            CatalogClient(BASE_URL).build_url("  ")

    @pytest.mark.parametrize(
        "barcode,segment",
        [
            ("a/b", "a%2Fb"),
            ("..", "%2E%2E"),
            (".", "%2E"),
            ("QR:pet food?1", "QR%3Apet%20food%3F1"),
        ],
    )
    def test_barcode_is_one_path_segment(self, barcode: str, segment: str) -> None:
        """Should percent-encode path structure inside the barcode."""
        client = CatalogClient(BASE_URL)

        assert client.build_url(barcode) == f"{BASE_URL}/products/{segment}"

    async def test_lookup_sends_encoded_segment(self, pet_food_envelope: dict[str, Any]) -> None:
        """Should request the encoded URL without normalizing it."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(body=pet_food_envelope)

            async with CatalogClient(BASE_URL) as client:
                await client.lookup("..")

            url = mock_get.call_args.args[0]
            assert str(url) == f"{BASE_URL}/products/%2E%2E"
            assert url.raw_path == "/api/v1/products/%2E%2E"


class TestCatalogClient:
    """Test lookup()."""

    async def test_lookup_success(self, pet_food_envelope: dict[str, Any]) -> None:
        """Should decode product with items in order."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(body=pet_food_envelope)

            async with CatalogClient(BASE_URL) as client:
                product = await client.lookup("1234567890123")

            assert product.name == "Healthy Pet Food"
            assert product.brand == "PetBrand"
            assert len(product.items) == 5
            assert product.items[0].name == "Chicken"
            assert all(item.status == SafetyStatus.EXCELLENT for item in product.items)

            args, kwargs = mock_get.call_args
            assert str(args[0]) == f"{BASE_URL}/products/1234567890123"
            assert kwargs["timeout"].total == CatalogClient.DEFAULT_TIMEOUT_SECONDS

    async def test_lookup_not_found(self) -> None:
        """Should raise NotFoundError for data: null."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(body={"data": None})

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(NotFoundError) as exc_info:
                    await client.lookup("0000000000000")

            assert exc_info.value.barcode == "0000000000000"

    async def test_lookup_404_with_null_envelope(self) -> None:
        """Should treat a 404 carrying data: null as not found."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(
                status=404, body={"data": None}
            )

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(NotFoundError):
                    await client.lookup("0000000000000")

    @pytest.mark.parametrize(
        "status,body,json_error",
        [
            (404, None, True),
            (500, {"error": "internal"}, False),
            (503, {"data": {"id": "x"}}, False),
        ],
    )
    async def test_lookup_error_status(self, status: int, body: Any, json_error: bool) -> None:
        """Should raise TransportError for other non-2xx responses."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(
                status=status, body=body, json_error=json_error
            )

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(TransportError) as exc_info:
                    await client.lookup("111")

            assert exc_info.value.cause == TransportCause.HTTP_STATUS
            assert not isinstance(exc_info.value, NotFoundError)

    async def test_lookup_timeout(self) -> None:
        """Should raise LookupTimeoutError with timeout cause."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.side_effect = asyncio.TimeoutError()

            async with CatalogClient(BASE_URL, timeout_seconds=0.5) as client:
                with pytest.raises(LookupTimeoutError) as exc_info:
                    await client.lookup("111")

            assert exc_info.value.cause == TransportCause.TIMEOUT

    async def test_lookup_connection_error(self) -> None:
        """Should raise TransportError with connection cause."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.side_effect = aiohttp.ClientConnectionError("Connection reset by peer")

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(TransportError) as exc_info:
                    await client.lookup("111")

            assert exc_info.value.cause == TransportCause.CONNECTION

    async def test_lookup_non_json_body(self) -> None:
        """Should raise DecodeError for unparseable 2xx bodies."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(json_error=True)

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(DecodeError) as exc_info:
                    await client.lookup("111")

            assert exc_info.value.cause == "json"

    async def test_lookup_missing_envelope(self, pet_food_payload: dict[str, Any]) -> None:
        """Should raise DecodeError for a bare product body."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(body=pet_food_payload)

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(DecodeError):
                    await client.lookup("1234567890123")

    async def test_lookup_empty_items(self, pet_food_envelope: dict[str, Any]) -> None:
        """Should raise DecodeError instead of returning an empty product."""
        pet_food_envelope["data"]["items"] = []

        with patch("aiohttp.ClientSession.get") as mock_get:
            mock_get.return_value.__aenter__.return_value = _response(body=pet_food_envelope)

            async with CatalogClient(BASE_URL) as client:
                with pytest.raises(DecodeError):
                    await client.lookup("1234567890123")

    async def test_lookup_outside_context(self) -> None:
        """Should refuse to run without a session."""
        client = CatalogClient(BASE_URL)

        with pytest.raises(ConfigurationError):
            await client.lookup("111")

    async def test_invalid_base_url_makes_no_request(self) -> None:
        """Should fail before touching the network."""
        with patch("aiohttp.ClientSession.get") as mock_get:
            async with CatalogClient("not a url") as client:
                with pytest.raises(ConfigurationError):
                    await client.lookup("111")

            mock_get.assert_not_called()

    async def test_context_manager_session_lifecycle(self) -> None:
        """Should create and close the session."""
        client = CatalogClient(BASE_URL)
        assert client._session is None

        async with client:
            assert client._session is not None

        assert client._session is None

    async def test_user_agent_header(self) -> None:
        """Should set the User-Agent header."""
        with patch("aiohttp.ClientSession") as mock_session_class:
            mock_session = AsyncMock()
            mock_session.close = AsyncMock()
            mock_session_class.return_value = mock_session

            async with CatalogClient(BASE_URL):
                mock_session_class.assert_called_once_with(headers={"User-Agent": "PawScan/1.0"})
