"""
Catalog API client.

Resolves barcodes against the product catalog over HTTP.
"""

import asyncio
from typing import Any, Optional
from urllib.parse import quote

import aiohttp
import pydantic
import structlog
from yarl import URL

from pawscan.domain.scan.catalog_mapper import CatalogMapper
from pawscan.domain.scan.models import Product
from pawscan.domain.shared.errors import (
    ConfigurationError,
    DecodeError,
    LookupTimeoutError,
    NotFoundError,
    TransportCause,
    TransportError,
    ValidationError,
)
from pawscan.domain.shared.value_objects import Barcode

logger = structlog.get_logger(__name__)


class CatalogClient:
    """Product catalog API client.

    Implements the ICatalogClient port. One request per lookup, no
    retries: retry policy belongs to the caller.

    Example:
        >>> async def scan():
        ...     async with CatalogClient("https://catalog.example.com/api/v1") as client:
        ...         product = await client.lookup("1234567890123")
        ...         return product
    """

    USER_AGENT = "PawScan/1.0"
    DEFAULT_TIMEOUT_SECONDS = 8.0

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: Catalog base endpoint (e.g. https://host/api/v1)
            timeout_seconds: Per-request timeout
        """
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "CatalogClient":
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(headers={"User-Agent": self.USER_AGENT})
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    def build_url(self, barcode: str) -> str:
        """Build the lookup URL for a barcode.

        Args:
            barcode: Decoded barcode

        Returns:
            {base_url}/products/{barcode}

        Raises:
            ConfigurationError: If base URL is not absolute http(s)
            ValidationError: If barcode is blank
        """
        try:
            base = URL(self.base_url)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid catalog base URL: {self.base_url!r}") from e

        if base.scheme not in ("http", "https") or not base.host:
            raise ConfigurationError(f"Invalid catalog base URL: {self.base_url!r}")

        try:
            code = Barcode.from_string(barcode)
        except pydantic.ValidationError as e:
            raise ValidationError("Barcode cannot be empty") from e

        return str(self._product_url(base, code))

    @staticmethod
    def _product_url(base: URL, code: Barcode) -> URL:
        """Join the barcode as a single percent-encoded path segment."""
        segment = quote(code.value, safe="")
        if segment in (".", ".."):
            segment = segment.replace(".", "%2E")
        return URL(f"{str(base).rstrip('/')}/products/{segment}", encoded=True)

    async def lookup(self, barcode: str) -> Product:
        """Get product by barcode.

        Args:
            barcode: Decoded barcode

        Returns:
            Product with at least one evaluated item

        Raises:
            ConfigurationError: If misconfigured or used outside async with
            LookupTimeoutError: If request times out
            TransportError: If connection fails or API returns an error status
            DecodeError: If response does not match the catalog contract
            NotFoundError: If catalog has no product for the barcode
        """
        url = URL(self.build_url(barcode), encoded=True)

        if not self._session:
            raise ConfigurationError("Client not initialized, use async with")

        try:
            async with self._session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                status = response.status
                parsed, body = await self._read_json(response)

        except asyncio.TimeoutError as e:
            logger.warning(
                "Catalog lookup timeout",
                barcode=barcode,
                timeout_seconds=self.timeout_seconds,
            )
            msg = f"Catalog lookup timed out after {self.timeout_seconds}s"
            raise LookupTimeoutError(msg) from e

        except aiohttp.ClientError as e:
            logger.warning("Catalog connection failed", barcode=barcode, error=str(e))
            msg = f"Catalog client error: {e}"
            raise TransportError(msg, cause=TransportCause.CONNECTION) from e

        if not 200 <= status < 300:
            if parsed and CatalogMapper.is_not_found_envelope(body):
                logger.info("Barcode not found in catalog", barcode=barcode, status=status)
                raise NotFoundError(barcode)

            logger.warning("Catalog API error", barcode=barcode, status=status)
            msg = f"Catalog API error: {status}"
            raise TransportError(msg, cause=TransportCause.HTTP_STATUS)

        if not parsed:
            logger.error("Catalog response is not JSON", barcode=barcode)
            raise DecodeError("Response body is not JSON", cause="json")

        try:
            envelope = CatalogMapper.parse_envelope(body)
            if envelope.data is None:
                logger.info("Barcode not found in catalog", barcode=barcode)
                raise NotFoundError(barcode)
            product = CatalogMapper.to_product(envelope.data)
        except DecodeError as e:
            logger.error(
                "Catalog response does not match contract",
                barcode=barcode,
                cause=e.cause,
                error=str(e),
            )
            raise

        logger.info(
            "Product found in catalog",
            barcode=barcode,
            product_id=product.id,
            name=product.name,
            items=len(product.items),
        )
        return product

    @staticmethod
    async def _read_json(response: aiohttp.ClientResponse) -> tuple[bool, Any]:
        """Decode the body as JSON whatever the content type.

        Returns:
            (parsed, body) where parsed is False for non-JSON bodies
        """
        try:
            return True, await response.json(content_type=None)
        except (aiohttp.ContentTypeError, ValueError):
            return False, None
