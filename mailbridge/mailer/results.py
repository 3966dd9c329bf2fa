"""Typed outcomes decoded from provider responses.

Each adapter turns whatever its transport returned into one of the variants
below and hands it to :func:`raise_for_outcome`, so the mapping from provider
status to exception lives in one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from mailbridge.exceptions import (
    UNKNOWN_ERROR_CODE,
    EmailDeliveryException,
    EmailError,
    InvalidRequestException,
    UnauthorizedException,
)


@dataclass(frozen=True)
class Success:
    message: str = ""


@dataclass(frozen=True)
class InvalidRequest:
    message: str = ""


@dataclass(frozen=True)
class Unauthorized:
    message: str = ""


@dataclass(frozen=True)
class DeliveryFailed:
    message: str = ""


@dataclass(frozen=True)
class Unknown:
    code: int = UNKNOWN_ERROR_CODE
    message: str = "Unknown error"


SendOutcome = Union[Success, InvalidRequest, Unauthorized, DeliveryFailed, Unknown]


def decode_mailgun_status(status_code: int, message: str = "") -> SendOutcome:
    """Map a Mailgun HTTP status to an outcome."""
    if status_code == 200:
        return Success(message)
    if status_code == 400:
        return InvalidRequest(message)
    if status_code == 401:
        return Unauthorized(message)
    if status_code == 402:
        return DeliveryFailed(message)
    return Unknown(UNKNOWN_ERROR_CODE, "Unknown error")


def decode_sendinblue_response(payload: Optional[Mapping[str, Any]]) -> SendOutcome:
    """Map a SendinBlue v2 JSON body (``{"code": ..., "message": ...}``)."""
    if not payload or not isinstance(payload, Mapping) or not payload.get("code"):
        return Unknown(UNKNOWN_ERROR_CODE, "Unknown exception")
    code = payload["code"]
    message = str(payload.get("message") or "")
    if code == "success":
        return Success(message)
    if code in ("failure", "error"):
        return InvalidRequest(message)
    return Unknown(
        UNKNOWN_ERROR_CODE, message or f"Unrecognized response code: {code!r}"
    )


# Amazon SES error codes grouped by outcome.
SES_UNAUTHORIZED_CODES = frozenset(
    {
        "InvalidClientTokenId",
        "SignatureDoesNotMatch",
        "UnrecognizedClientException",
        "AccessDenied",
        "AccessDeniedException",
        "IncompleteSignature",
        "MissingAuthenticationToken",
    }
)
SES_DELIVERY_CODES = frozenset(
    {
        "MessageRejected",
        "MailFromDomainNotVerified",
        "MailFromDomainNotVerifiedException",
        "AccountSendingPausedException",
        "ConfigurationSetSendingPausedException",
        "Throttling",
    }
)
SES_INVALID_REQUEST_CODES = frozenset(
    {
        "InvalidParameterValue",
        "InvalidParameterCombination",
        "MissingParameter",
        "ValidationError",
        "ConfigurationSetDoesNotExist",
    }
)


def decode_ses_error(error_code: str, message: str = "") -> SendOutcome:
    """Map an SES ``Error.Code`` from a failed call to an outcome."""
    if error_code in SES_UNAUTHORIZED_CODES:
        return Unauthorized(message)
    if error_code in SES_DELIVERY_CODES:
        return DeliveryFailed(message)
    if error_code in SES_INVALID_REQUEST_CODES:
        return InvalidRequest(message)
    return Unknown(UNKNOWN_ERROR_CODE, message or error_code or "Unknown error")


def raise_for_outcome(outcome: SendOutcome) -> None:
    """Return for :class:`Success`, raise the matching exception otherwise."""
    if isinstance(outcome, Success):
        return
    if isinstance(outcome, InvalidRequest):
        raise InvalidRequestException(outcome.message)
    if isinstance(outcome, Unauthorized):
        raise UnauthorizedException(outcome.message)
    if isinstance(outcome, DeliveryFailed):
        raise EmailDeliveryException(outcome.message)
    raise EmailError(outcome.message, outcome.code)


__all__ = [
    "Success",
    "InvalidRequest",
    "Unauthorized",
    "DeliveryFailed",
    "Unknown",
    "SendOutcome",
    "decode_mailgun_status",
    "decode_sendinblue_response",
    "decode_ses_error",
    "raise_for_outcome",
]
