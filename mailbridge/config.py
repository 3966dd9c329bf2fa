"""Build senders from environment variables.

``MAIL_PROVIDER`` selects the implementation returned by
:func:`create_sender`; each provider then reads its own credentials:

* ``mailgun`` – ``MAILGUN_API_KEY``, ``MAILGUN_DOMAIN``, ``MAILGUN_BASE_URL``
* ``sendinblue`` – ``SENDINBLUE_API_KEY``, ``SENDINBLUE_BASE_URL``
* ``ses`` – ``AWS_ACCESS_KEY_ID``, ``AWS_SECRET_ACCESS_KEY``, ``AWS_REGION``

``MAIL_TIMEOUT`` sets the HTTP timeout in seconds (default 10).  Missing
required variables raise ``ValueError``.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Optional

from mailbridge.mailer import EmailSenderInterface
from mailbridge.mailer.mailgun_sender import MailgunSender
from mailbridge.mailer.sendinblue_sender import SendinBlueSender
from mailbridge.mailer.ses_sender import AmazonSESSender

DEFAULT_TIMEOUT = 10.0


def _timeout() -> float:
    raw = os.environ.get("MAIL_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"MAIL_TIMEOUT must be a number, got {raw!r}") from exc


def mailgun_from_env(logger: Optional[logging.Logger] = None) -> MailgunSender:
    api_key = os.environ.get("MAILGUN_API_KEY")
    domain = os.environ.get("MAILGUN_DOMAIN")
    if not api_key or not domain:
        raise ValueError("MAILGUN_API_KEY and MAILGUN_DOMAIN must be set")
    return MailgunSender(
        api_key,
        domain,
        logger=logger,
        base_url=os.environ.get("MAILGUN_BASE_URL") or None,
        timeout=_timeout(),
    )


def sendinblue_from_env(
    logger: Optional[logging.Logger] = None,
) -> SendinBlueSender:
    access_key = os.environ.get("SENDINBLUE_API_KEY")
    if not access_key:
        raise ValueError("SENDINBLUE_API_KEY must be set")
    return SendinBlueSender(
        access_key,
        logger=logger,
        base_url=os.environ.get("SENDINBLUE_BASE_URL") or None,
        timeout=_timeout(),
    )


def ses_from_env(logger: Optional[logging.Logger] = None) -> AmazonSESSender:
    access_key = os.environ.get("AWS_ACCESS_KEY_ID")
    secret_key = os.environ.get("AWS_SECRET_ACCESS_KEY")
    if not access_key or not secret_key:
        raise ValueError("AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY must be set")
    return AmazonSESSender(
        access_key,
        secret_key,
        region=os.environ.get("AWS_REGION") or None,
        logger=logger,
    )


PROVIDERS: Dict[str, Callable[[Optional[logging.Logger]], EmailSenderInterface]] = {
    "mailgun": mailgun_from_env,
    "sendinblue": sendinblue_from_env,
    "ses": ses_from_env,
}


def create_sender(
    provider: Optional[str] = None, logger: Optional[logging.Logger] = None
) -> EmailSenderInterface:
    """Return the sender named by ``provider`` or ``MAIL_PROVIDER``."""
    name = (provider or os.environ.get("MAIL_PROVIDER", "")).strip().lower()
    if not name:
        raise ValueError("MAIL_PROVIDER must be set")
    try:
        factory = PROVIDERS[name]
    except KeyError:
        known = ", ".join(sorted(PROVIDERS))
        raise ValueError(
            f"Unknown mail provider {name!r}; expected one of {known}"
        ) from None
    return factory(logger)


__all__ = [
    "create_sender",
    "mailgun_from_env",
    "sendinblue_from_env",
    "ses_from_env",
    "PROVIDERS",
]
