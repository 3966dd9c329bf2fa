"""Provider-neutral email value objects.

An :class:`Email` is built by the caller, handed to a sender and never
modified by it.  The same ``attachments`` list carries both regular files and
inline images; an attachment with a ``content_id`` is rendered inline.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

AddressLike = Union["Address", str, Tuple[str, Optional[str]]]


@dataclass(frozen=True)
class Address:
    """An email address with an optional display name.

    Two addresses are equal when their ``email`` values match; the name is
    only a label.
    """

    email: str
    name: Optional[str] = field(default=None, compare=False)

    @classmethod
    def coerce(cls, value: AddressLike) -> "Address":
        if isinstance(value, Address):
            return value
        if isinstance(value, str):
            return cls(value)
        email, name = value
        return cls(email, name)


@dataclass
class Attachment:
    """A file attached to an email, read from ``path`` or ``content``."""

    name: str
    content_id: Optional[str] = None
    path: Optional[str] = None
    content: Optional[bytes] = None
    mime_type: Optional[str] = None

    @property
    def is_inline(self) -> bool:
        return bool(self.content_id)

    def guess_mime_type(self) -> Tuple[str, str]:
        """Return ``(maintype, subtype)``, defaulting to octet-stream."""
        mime = self.mime_type or mimetypes.guess_type(self.name)[0]
        if not mime or "/" not in mime:
            mime = "application/octet-stream"
        maintype, subtype = mime.split("/", 1)
        return maintype, subtype


@dataclass
class Email:
    """A message to send, independent of any provider.

    Address fields hold :class:`Address` values; the builder methods also
    accept a bare email string or an ``(email, name)`` tuple.  ``from`` and
    at least one recipient are expected by every provider but not checked
    here.
    """

    from_address: Optional[Address] = None
    to: List[Address] = field(default_factory=list)
    cc: List[Address] = field(default_factory=list)
    bcc: List[Address] = field(default_factory=list)
    reply_to: List[Address] = field(default_factory=list)
    subject: str = ""
    text_body: Optional[str] = None
    html_body: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)

    # Fluent builder
    def set_from(self, email: AddressLike, name: Optional[str] = None) -> "Email":
        self.from_address = _address(email, name)
        return self

    def add_to(self, email: AddressLike, name: Optional[str] = None) -> "Email":
        self.to.append(_address(email, name))
        return self

    def add_cc(self, email: AddressLike, name: Optional[str] = None) -> "Email":
        self.cc.append(_address(email, name))
        return self

    def add_bcc(self, email: AddressLike, name: Optional[str] = None) -> "Email":
        self.bcc.append(_address(email, name))
        return self

    def add_reply_to(
        self, email: AddressLike, name: Optional[str] = None
    ) -> "Email":
        self.reply_to.append(_address(email, name))
        return self

    def set_subject(self, subject: str) -> "Email":
        self.subject = subject
        return self

    def set_text_body(self, text: str) -> "Email":
        self.text_body = text
        return self

    def set_html_body(self, html: str) -> "Email":
        self.html_body = html
        return self

    def add_attachment(self, attachment: Attachment) -> "Email":
        self.attachments.append(attachment)
        return self

    @property
    def recipients(self) -> List[Address]:
        """All envelope recipients: to, then cc, then bcc."""
        return [*self.to, *self.cc, *self.bcc]


def _address(value: AddressLike, name: Optional[str]) -> Address:
    """An explicit ``name`` overrides whatever ``value`` carries."""
    address = Address.coerce(value)
    if name is not None:
        return Address(address.email, name)
    return address


__all__ = ["Address", "AddressLike", "Attachment", "Email"]
