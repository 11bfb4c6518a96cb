"""
Ports (Interfaces) for Scan Session Dependencies.

Defines the contracts the scan session needs from the code reader
and the catalog. Infrastructure (or tests) provide implementations.

Design Pattern: Ports & Adapters (Hexagonal Architecture)
"""

from typing import AsyncIterator, Protocol, runtime_checkable

from pawscan.domain.scan.models import Product


@runtime_checkable
class ICodeReader(Protocol):
    """
    Port for the camera code reader.

    Emits already decoded barcode strings. Symbology and camera
    handling are the adapter's business.

    Example implementation:
        >>> class StaticCodeReader:
        ...     def start(self) -> AsyncIterator[str]:
        ...         return self._codes()
        ...
        ...     async def stop(self) -> None:
        ...         self.stopped = True
    """

    def start(self) -> AsyncIterator[str]:
        """
        Start capturing.

        Returns:
            Asynchronous stream of decoded codes, unbounded until stop()
        """
        ...

    async def stop(self) -> None:
        """Stop capturing and release the camera."""
        ...


@runtime_checkable
class ICatalogClient(Protocol):
    """
    Port for the product catalog.

    Implementations raise CatalogError subclasses on failure and
    never retry.
    """

    async def lookup(self, barcode: str) -> Product:
        """
        Resolve a barcode to a product.

        Args:
            barcode: Decoded barcode

        Returns:
            Product with at least one evaluated item

        Raises:
            ConfigurationError: Client misconfigured
            TransportError: Request did not complete
            DecodeError: Response does not match contract
            NotFoundError: Barcode not in catalog
        """
        ...
