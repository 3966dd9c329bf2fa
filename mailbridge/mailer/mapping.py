"""Helpers shared by the provider adapters to map addresses and attachments."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from email.utils import formataddr
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from mailbridge.message import Address, Attachment

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttachmentSource:
    """Where the bytes of an attachment come from: a file or memory."""

    path: Optional[str] = None
    content: Optional[bytes] = None

    @property
    def is_file(self) -> bool:
        return self.path is not None


def format_address(address: Address) -> str:
    """Return ``Name <email>`` when a name is set, else the bare email.

    The name is quoted and escaped per RFC 5322 when it holds specials such
    as commas or double quotes.
    """
    if address.name:
        return formataddr((address.name, address.email))
    return address.email


def join_addresses(addresses: Iterable[Address], separator: str = ", ") -> str:
    return separator.join(format_address(a) for a in addresses)


def address_pair(address: Address) -> Dict[str, str]:
    return {address.email: address.name or ""}


def address_map(addresses: Optional[Iterable[Address]]) -> Optional[Dict[str, str]]:
    """Map addresses to ``{email: name}``; ``None`` when there are none.

    A later duplicate email overwrites the earlier display name.
    """
    mapped: Dict[str, str] = {}
    for address in addresses or ():
        mapped.update(address_pair(address))
    return mapped or None


def partition_attachments(
    attachments: Optional[Iterable[Attachment]],
) -> Tuple[List[Attachment], List[Attachment]]:
    """Split attachments into ``(regular, inline)`` by ``content_id``."""
    regular: List[Attachment] = []
    inline: List[Attachment] = []
    for attachment in attachments or ():
        (inline if attachment.is_inline else regular).append(attachment)
    return regular, inline


def resolve_source(attachment: Attachment) -> Optional[AttachmentSource]:
    """Pick the byte source of ``attachment``: path first, then content.

    Returns ``None`` when neither is set; callers skip such attachments.
    """
    if attachment.path:
        return AttachmentSource(path=attachment.path)
    if attachment.content:
        return AttachmentSource(content=attachment.content)
    LOGGER.debug("Skipping attachment %r: no path or content", attachment.name)
    return None


def read_bytes(attachment: Attachment) -> Optional[bytes]:
    source = resolve_source(attachment)
    if source is None:
        return None
    if source.is_file:
        return Path(source.path).read_bytes()  # type: ignore[arg-type]
    return source.content


def encode_base64(attachment: Attachment) -> Optional[str]:
    data = read_bytes(attachment)
    if not data:
        return None
    return base64.b64encode(data).decode("ascii")


__all__ = [
    "AttachmentSource",
    "format_address",
    "join_addresses",
    "address_pair",
    "address_map",
    "partition_attachments",
    "resolve_source",
    "read_bytes",
    "encode_base64",
]
