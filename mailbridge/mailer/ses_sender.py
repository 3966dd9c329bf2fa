"""Amazon SES email sender implementation.

``AmazonSESSender`` renders the email as a MIME document with
:class:`email.message.EmailMessage` and submits it through
``send_raw_email`` so that attachments and inline images survive.  Inline
images are added as ``multipart/related`` parts of the HTML body, referenced
by their ``Content-ID``.

Environment variables used by :func:`mailbridge.config.ses_from_env`:

* ``AWS_ACCESS_KEY_ID`` / ``AWS_SECRET_ACCESS_KEY`` – credentials
* ``AWS_REGION`` – Optional region; defaults to ``us-east-1``
"""

from __future__ import annotations

import logging
from email.message import EmailMessage
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from mailbridge.exceptions import EmailError
from mailbridge.mailer import EmailSenderInterface
from mailbridge.mailer.mapping import (
    format_address,
    join_addresses,
    partition_attachments,
    read_bytes,
)
from mailbridge.mailer.results import decode_ses_error, raise_for_outcome
from mailbridge.message import Email

DEFAULT_REGION = "us-east-1"


class AmazonSESSender(EmailSenderInterface):
    """Amazon SES implementation of the ``EmailSenderInterface``."""

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        client: Any = None,
    ) -> None:
        super().__init__(logger)
        self._region = region or DEFAULT_REGION
        if client is None:
            client = boto3.client(
                "ses",
                region_name=self._region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
            )
        self._client = client

    def send(self, email: Email) -> None:
        """Send ``email`` through SES.

        Raises:
            UnauthorizedException: When SES rejects the credentials.
            EmailDeliveryException: When SES refuses to deliver the message.
            InvalidRequestException: When SES rejects the parameters.
            EmailError: On any other failure.
        """
        try:
            message = self.build_mime(email)
            params: Dict[str, Any] = {
                "Destinations": [a.email for a in email.recipients],
                "RawMessage": {"Data": message.as_bytes()},
            }
            if email.from_address is not None:
                params["Source"] = format_address(email.from_address)
            try:
                self._client.send_raw_email(**params)
            except ClientError as exc:
                error = exc.response.get("Error", {})
                raise_for_outcome(
                    decode_ses_error(
                        str(error.get("Code", "")), str(error.get("Message", ""))
                    )
                )
            self._log_sent(email)
        except EmailError as exc:
            self._log_failure(exc.message, email)
            raise
        except Exception as exc:
            raise self._wrap_unexpected(exc, email) from exc

    def build_mime(self, email: Email) -> EmailMessage:
        """Render ``email`` as a MIME message (``Bcc`` is not a header)."""
        message = EmailMessage()
        if email.from_address is not None:
            message["From"] = format_address(email.from_address)
        if email.to:
            message["To"] = join_addresses(email.to)
        if email.cc:
            message["Cc"] = join_addresses(email.cc)
        if email.reply_to:
            message["Reply-To"] = join_addresses(email.reply_to)
        message["Subject"] = email.subject

        regular, inline = partition_attachments(email.attachments)

        if email.text_body:
            message.set_content(email.text_body)
        if email.html_body:
            if email.text_body:
                message.add_alternative(email.html_body, subtype="html")
                body_part = message.get_payload()[-1]
            else:
                message.set_content(email.html_body, subtype="html")
                body_part = message
        else:
            if not email.text_body:
                message.set_content("")
            body_part = message

        for attachment in inline:
            data = read_bytes(attachment)
            if not data:
                continue
            maintype, subtype = attachment.guess_mime_type()
            body_part.add_related(
                data,
                maintype=maintype,
                subtype=subtype,
                cid=f"<{attachment.content_id}>",
                filename=attachment.name,
                disposition="inline",
            )
        for attachment in regular:
            data = read_bytes(attachment)
            if not data:
                continue
            maintype, subtype = attachment.guess_mime_type()
            message.add_attachment(
                data, maintype=maintype, subtype=subtype, filename=attachment.name
            )
        return message


__all__ = ["AmazonSESSender"]
