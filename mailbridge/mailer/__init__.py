"""Abstract interface shared by every provider adapter.

This subpackage defines the common ``send`` contract along with concrete
implementations for the Mailgun HTTP API, the SendinBlue v2 API and Amazon
SES.  Client code can select an implementation based on configuration (see
:func:`mailbridge.config.create_sender`) without changing the calling
semantics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from mailbridge.exceptions import EmailError
from mailbridge.message import Email


class EmailSenderInterface(ABC):
    """Abstract base class for email senders.

    Implementations must provide a ``send`` method.  The optional ``logger``
    receives exactly one record per call: ``info`` when the provider accepted
    the message and ``error`` when it did not.  Each record carries the email
    as ``record.email``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger

    @abstractmethod
    def send(self, email: Email) -> None:
        """Send a single email message.

        Args:
            email: The message to deliver.

        Raises:
            EmailError: Or one of its subclasses when the provider reports a
                failure or the transport fails.
        """
        raise NotImplementedError

    def _log_sent(self, email: Email) -> None:
        if self._logger is not None:
            self._logger.info(
                "Email sent: '%s'", email.subject, extra={"email": email}
            )

    def _log_failure(self, message: str, email: Email) -> None:
        if self._logger is not None:
            self._logger.error(
                "Email error: '%s'", message, extra={"email": email}
            )

    def _wrap_unexpected(self, exc: BaseException, email: Email) -> EmailError:
        """Log ``exc`` and return the generic error to raise in its place."""
        message = str(exc)
        self._log_failure(message, email)
        return EmailError(message, error_code(exc))


def error_code(exc: BaseException) -> int:
    """Best-effort integer code of an arbitrary exception (0 when absent)."""
    code = getattr(exc, "code", None)
    if isinstance(code, int):
        return code
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    errno = getattr(exc, "errno", None)
    return errno if isinstance(errno, int) else 0


__all__ = ["EmailSenderInterface", "error_code"]
