"""SendinBlue-based email sender implementation.

``SendinBlueSender`` posts one JSON payload to the SendinBlue v2 ``email``
endpoint.  Address lists become ``{email: name}`` objects and attachments are
base64-encoded in place, so no temporary files are involved.  Empty address
lists and attachment sets are sent as ``null`` rather than empty objects.

Environment variables used by :func:`mailbridge.config.sendinblue_from_env`:

* ``SENDINBLUE_API_KEY`` – access key for the v2 API
* ``SENDINBLUE_BASE_URL`` – Optional base URL; defaults to the official API
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from mailbridge.exceptions import EmailError
from mailbridge.mailer import EmailSenderInterface
from mailbridge.mailer.mapping import (
    address_map,
    address_pair,
    encode_base64,
    partition_attachments,
)
from mailbridge.mailer.results import decode_sendinblue_response, raise_for_outcome
from mailbridge.message import Attachment, Email

DEFAULT_BASE_URL = "https://api.sendinblue.com/v2.0"


class SendinBlueSender(EmailSenderInterface):
    """SendinBlue implementation of the ``EmailSenderInterface``."""

    def __init__(
        self,
        access_key: str,
        logger: Optional[logging.Logger] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ) -> None:
        super().__init__(logger)
        self._access_key = access_key
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def email_url(self) -> str:
        return f"{self._base_url}/email"

    def send(self, email: Email) -> None:
        """Send ``email`` through SendinBlue.

        Raises:
            InvalidRequestException: When the API answers ``failure`` or
                ``error``.
            EmailError: When the answer has no recognised code, or on an
                unexpected failure.
        """
        try:
            payload = self.build_payload(email)
            response = self._session.post(
                self.email_url,
                json=payload,
                headers={"api-key": self._access_key},
                timeout=self._timeout,
            )
            raise_for_outcome(decode_sendinblue_response(_json_body(response)))
            self._log_sent(email)
        except EmailError as exc:
            self._log_failure(exc.message, email)
            raise
        except Exception as exc:
            raise self._wrap_unexpected(exc, email) from exc

    def build_payload(self, email: Email) -> Dict[str, Any]:
        """Map ``email`` to the JSON body of ``POST /email``."""
        regular, inline = partition_attachments(email.attachments)
        has_attachments = bool(email.attachments)
        return {
            "to": address_map(email.to),
            "cc": address_map(email.cc),
            "bcc": address_map(email.bcc),
            "from": address_pair(email.from_address) if email.from_address else None,
            "replyto": address_map(email.reply_to),
            "subject": email.subject,
            "text": email.text_body,
            "html": email.html_body,
            "attachment": (
                _encode_all(regular, key="name") if has_attachments else None
            ),
            "inline_image": (
                _encode_all(inline, key="content_id") if has_attachments else None
            ),
        }


def _encode_all(attachments: List[Attachment], key: str) -> Dict[str, str]:
    encoded: Dict[str, str] = {}
    for attachment in attachments:
        content = encode_base64(attachment)
        if content:
            encoded[getattr(attachment, key)] = content
    return encoded


def _json_body(response: Optional[requests.Response]) -> Optional[Dict[str, Any]]:
    if response is None:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


__all__ = ["SendinBlueSender"]
