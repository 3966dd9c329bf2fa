"""Exceptions raised by every sender.

Callers catch :class:`EmailError` for any failure, or one of its subclasses
to react to a specific category reported by the provider.
"""

from __future__ import annotations

# Code carried by failures that no provider status maps to.
UNKNOWN_ERROR_CODE: int = 603


class EmailError(Exception):
    """Generic sending failure.

    ``message`` is the provider's text when one is available; ``code`` is the
    provider or transport code, or :data:`UNKNOWN_ERROR_CODE`.  When an
    unexpected error is wrapped, the original is kept as ``__cause__``.
    """

    def __init__(self, message: str = "", code: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidRequestException(EmailError):
    """The provider rejected the request shape or content."""


class UnauthorizedException(EmailError):
    """The provider rejected the credentials."""


class EmailDeliveryException(EmailError):
    """The request was accepted but the provider could not deliver it."""


__all__ = [
    "UNKNOWN_ERROR_CODE",
    "EmailError",
    "InvalidRequestException",
    "UnauthorizedException",
    "EmailDeliveryException",
]
