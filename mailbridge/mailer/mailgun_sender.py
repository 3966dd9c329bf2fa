"""Mailgun-based email sender implementation.

This module defines ``MailgunSender``, which sends email via the Mailgun
HTTP API (``POST /v3/<domain>/messages``).  Recipients are sent as repeated
form fields and attachments as multipart files.  Attachments given as
in-memory content are spooled to temporary files for the duration of the
request; every handle opened for a call is closed before ``send`` returns or
raises.  See the Mailgun API documentation for details on the parameters
accepted.

Environment variables used by :func:`mailbridge.config.mailgun_from_env`:

* ``MAILGUN_API_KEY`` – API key for Mailgun
* ``MAILGUN_DOMAIN`` – Domain configured in Mailgun
* ``MAILGUN_BASE_URL`` – Optional base URL; defaults to the official API
"""

from __future__ import annotations

import logging
import tempfile
from contextlib import ExitStack
from typing import IO, List, Optional, Tuple

import requests

from mailbridge.exceptions import EmailError
from mailbridge.mailer import EmailSenderInterface
from mailbridge.mailer.mapping import (
    format_address,
    join_addresses,
    partition_attachments,
    resolve_source,
)
from mailbridge.mailer.results import decode_mailgun_status, raise_for_outcome
from mailbridge.message import Attachment, Email

DEFAULT_BASE_URL = "https://api.mailgun.net/v3"

FormFields = List[Tuple[str, str]]
FormFiles = List[Tuple[str, Tuple[str, IO[bytes]]]]


class MailgunSender(EmailSenderInterface):
    """Mailgun implementation of the ``EmailSenderInterface``."""

    def __init__(
        self,
        api_key: str,
        domain: str,
        logger: Optional[logging.Logger] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ) -> None:
        super().__init__(logger)
        self._api_key = api_key
        self._domain = domain
        self._base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def messages_url(self) -> str:
        return f"{self._base_url}/{self._domain}/messages"

    def send(self, email: Email) -> None:
        """Send ``email`` through Mailgun.

        Raises:
            InvalidRequestException: On HTTP 400.
            UnauthorizedException: On HTTP 401.
            EmailDeliveryException: On HTTP 402.
            EmailError: On any other status or an unexpected failure.
        """
        with ExitStack() as handles:
            try:
                data, files = self.build_message(email, handles)
                response = self._session.post(
                    self.messages_url,
                    auth=("api", self._api_key),
                    data=data,
                    files=files or None,
                    timeout=self._timeout,
                )
                raise_for_outcome(
                    decode_mailgun_status(
                        response.status_code, _response_message(response)
                    )
                )
                self._log_sent(email)
            except EmailError as exc:
                self._log_failure(exc.message, email)
                raise
            except Exception as exc:
                raise self._wrap_unexpected(exc, email) from exc

    def build_message(
        self, email: Email, handles: ExitStack
    ) -> Tuple[FormFields, FormFiles]:
        """Map ``email`` to Mailgun form fields and multipart files.

        File handles opened for attachments are registered on ``handles``
        and closed when the caller's stack unwinds.
        """
        data: FormFields = []
        if email.from_address is not None:
            data.append(("from", format_address(email.from_address)))
        if email.reply_to:
            data.append(("h:Reply-To", join_addresses(email.reply_to)))
        for field_name, recipients in (
            ("to", email.to),
            ("cc", email.cc),
            ("bcc", email.bcc),
        ):
            for recipient in recipients:
                data.append((field_name, format_address(recipient)))
        data.append(("subject", email.subject))
        if email.text_body:
            data.append(("text", email.text_body))
        if email.html_body:
            data.append(("html", email.html_body))

        files: FormFiles = []
        regular, inline = partition_attachments(email.attachments)
        for attachment in regular:
            handle = self._open_attachment(attachment, handles)
            if handle is not None:
                files.append(("attachment", (attachment.name, handle)))
        for attachment in inline:
            handle = self._open_attachment(attachment, handles)
            if handle is not None:
                files.append(("inline", (attachment.content_id or "", handle)))
        return data, files

    @staticmethod
    def _open_attachment(
        attachment: Attachment, handles: ExitStack
    ) -> Optional[IO[bytes]]:
        source = resolve_source(attachment)
        if source is None:
            return None
        if source.is_file:
            return handles.enter_context(open(source.path, "rb"))  # type: ignore[arg-type]
        tmp = handles.enter_context(tempfile.TemporaryFile())
        tmp.write(source.content or b"")
        tmp.seek(0)
        return tmp


def _response_message(response: requests.Response) -> str:
    """Return Mailgun's ``message`` field, or the raw body text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or ""
    if isinstance(body, dict):
        return str(body.get("message") or "")
    return ""


__all__ = ["MailgunSender"]
