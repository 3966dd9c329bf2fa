"""Top-level package for mailbridge.

mailbridge sends transactional email through interchangeable providers.
Callers build a :class:`~mailbridge.message.Email`, pick a sender
(Mailgun, SendinBlue or Amazon SES) and call ``send``; provider failures
surface as the exceptions in :mod:`mailbridge.exceptions`.

The ``__all__`` variable enumerates the primary public modules for
convenience when using ``from mailbridge import ...``.
"""

from __future__ import annotations

__all__ = [
    "config",
    "exceptions",
    "mailer",
    "message",
]

# SemVer version of the package
__version__: str = "0.1.0"
