"""
Error types for the screener.
Per-symbol failures are absorbed by the orchestrator; only structural
failures reach the caller.
"""

from typing import Optional


class ScreenerError(Exception):
    """Base class for all screener errors."""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ProviderError(ScreenerError):
    """The market-data provider could not be reached or returned an unusable payload.

    Covers network failures, non-2xx responses, malformed bodies, throttle
    notices and call timeouts. "Not found" is NOT an error: clients return None.
    """

    def __init__(self, symbol: str, reason: str) -> None:
        super().__init__(f"Provider request failed for {symbol}: {reason}", code="PROVIDER_ERROR")
        self.symbol = symbol
        self.reason = reason


class InvalidRequestError(ScreenerError):
    """Structurally bad input, e.g. an unknown screen type."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="INVALID_REQUEST")


class ConfigurationError(ScreenerError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFIGURATION_ERROR")
