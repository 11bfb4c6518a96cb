"""
Domain exceptions.

Typed exceptions for explicit error handling.
Catalog failures are split by what the user can do about them.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


class ValidationError(DomainError):
    """
    Input validation failed.

    Raised when:
    - Empty or whitespace barcode
    - Out of range values

    Example:
        >>> raise ValidationError("Barcode cannot be empty")
    """

    pass


# ═══════════════════════════════════════════════════════════
# SCAN DOMAIN EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ScanDomainError(DomainError):
    """Base exception for scan domain."""

    pass


class InvalidTransitionError(ScanDomainError):
    """
    Scan session command not allowed in current state.

    Raised when:
    - "start scan" while a scan or lookup is already running
    - "start scan" on a resolved/failed session that was not dismissed

    Example:
        >>> raise InvalidTransitionError("Cannot start scan from looking_up")
    """

    pass


# ═══════════════════════════════════════════════════════════
# CATALOG EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class CatalogError(ScanDomainError):
    """
    Catalog lookup failed.

    Base class for every failure of a barcode lookup.
    The scan session converts these into a failed state.
    """

    pass


class ConfigurationError(CatalogError):
    """
    Client is misconfigured.

    Raised before any network activity when:
    - Base URL is not an absolute http(s) URL
    - Client used outside its async context
    - Settings contain unparseable values

    Not recoverable by retrying.

    Example:
        >>> raise ConfigurationError("Invalid catalog base URL: 'ftp:/x'")
    """

    pass


class TransportCause(str, Enum):
    """Why a request never produced a usable response."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    HTTP_STATUS = "http_status"


class TransportError(CatalogError):
    """
    Request did not complete.

    Raised when:
    - Connection refused/reset, DNS failure
    - Request exceeds timeout
    - Non-2xx status without a not-found envelope

    Recoverable: the user may start a new scan.

    Example:
        >>> raise TransportError("Connection reset", cause=TransportCause.CONNECTION)
    """

    def __init__(self, message: str, cause: TransportCause = TransportCause.CONNECTION) -> None:
        super().__init__(message)
        self.cause = cause


class LookupTimeoutError(TransportError):
    """
    Lookup timed out.

    Example:
        >>> raise LookupTimeoutError("Catalog lookup timed out after 8.0s")
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, cause=TransportCause.TIMEOUT)


class DecodeError(CatalogError):
    """
    Response does not match the catalog contract.

    Raised when:
    - Body is not JSON or not a {"data": ...} envelope
    - Product fields fail validation (unknown status, bad rating)
    - Product has no evaluation items

    Indicates a backend/client mismatch rather than a network fault.

    Example:
        >>> raise DecodeError("Unknown status 'great'", cause="items.0.status")
    """

    def __init__(self, message: str, cause: Optional[str] = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotFoundError(CatalogError):
    """
    Barcode not in catalog.

    Expected business outcome, not a fault.

    Example:
        >>> raise NotFoundError("0000000000000")
    """

    def __init__(self, barcode: str) -> None:
        super().__init__(f"Barcode {barcode} not found")
        self.barcode = barcode
