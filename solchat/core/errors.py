"""
Error Classification

Every failure a tool handler, upstream service, wallet or model session can raise.
Errors are classified as recoverable (transient, may be retried) or not.
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Categories of errors for retry and reporting decisions."""

    VALIDATION = "validation"                  # Bad or missing caller input
    UNKNOWN_TOKEN = "unknown_token"            # Symbol could not be resolved
    UNSUPPORTED_TOKEN = "unsupported_token"    # Resolved, but the capability is missing
    NOT_FOUND = "not_found"                    # Named record is absent
    UPSTREAM_TRANSIENT = "upstream_transient"  # Rate limit, 5xx or network failure
    UPSTREAM_REJECTED = "upstream_rejected"    # Definitive error payload from a dependency
    NO_ROUTE = "no_route"                      # Aggregator has no quote
    BUILD = "build"                            # Aggregator could not build a transaction
    WALLET = "wallet"                          # User rejection or adapter failure
    TRANSPORT = "transport"                    # Model session / connection failure


class SolchatError(Exception):
    """Base class for all typed failures."""

    category: ErrorCategory = ErrorCategory.VALIDATION
    recoverable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SolchatError):
    """Caller input is missing or malformed."""

    category = ErrorCategory.VALIDATION


class UnknownTokenError(SolchatError):
    """A symbol could not be resolved to a mint or price feed."""

    category = ErrorCategory.UNKNOWN_TOKEN

    def __init__(self, token: str, reason: Optional[str] = None):
        message = f"Unknown token: {token}"
        if reason:
            message = f"{message}. {reason}"
        super().__init__(message)
        self.token = token


class UnsupportedTokenError(SolchatError):
    """The token is known but the requested operation does not support it."""

    category = ErrorCategory.UNSUPPORTED_TOKEN


class NotFoundError(SolchatError):
    category = ErrorCategory.NOT_FOUND


class UpstreamError(SolchatError):
    """A dependency (RPC, aggregator, price feed) failed."""

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class UpstreamTransientError(UpstreamError):
    """Rate limit, server error or network failure. Safe to retry."""

    category = ErrorCategory.UPSTREAM_TRANSIENT
    recoverable = True

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message, provider=provider, status_code=status_code)
        self.retry_after = retry_after


class UpstreamRejectedError(UpstreamError):
    """The dependency answered with a definitive error. Never retried."""

    category = ErrorCategory.UPSTREAM_REJECTED


class NoRouteError(UpstreamRejectedError):
    category = ErrorCategory.NO_ROUTE


class BuildError(UpstreamRejectedError):
    category = ErrorCategory.BUILD


class WalletError(SolchatError):
    """Wallet adapter failure or user rejection on the client."""

    category = ErrorCategory.WALLET


class TransportFatalError(SolchatError):
    """The model session itself failed; aborts the current turn only."""

    category = ErrorCategory.TRANSPORT


def classify_http_status(status_code: int) -> ErrorCategory:
    """Map an HTTP status from a dependency onto a retry category."""
    if status_code == 429 or status_code >= 500:
        return ErrorCategory.UPSTREAM_TRANSIENT
    return ErrorCategory.UPSTREAM_REJECTED
