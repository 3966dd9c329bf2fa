import base64
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

import pytest
import requests

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mailbridge.exceptions import (
    UNKNOWN_ERROR_CODE,
    EmailError,
    InvalidRequestException,
)
from mailbridge.mailer.sendinblue_sender import SendinBlueSender
from mailbridge.message import Attachment, Email

LOGGER_NAME = "tests.sendinblue"
_NO_JSON = object()


class _FakeResponse:
    def __init__(self, body: Any) -> None:
        self._body = body

    def json(self) -> Any:
        if self._body is _NO_JSON:
            raise ValueError("no json")
        return self._body


class _FakeSession:
    def __init__(self, body: Any = None, error: Optional[Exception] = None) -> None:
        self.body = {"code": "success", "message": "Email sent successfully."} if body is None else body
        self.error = error
        self.calls: List[Tuple[str, dict]] = []

    def post(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.body)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _email() -> Email:
    return (
        Email()
        .set_from("sender@example.com", "Sender")
        .add_to("jane@example.com", "Jane")
        .add_to("joe@example.com")
        .set_subject("Hello, world!")
        .set_text_body("Hello World! How are you?")
    )


def _sender(session: _FakeSession) -> SendinBlueSender:
    return SendinBlueSender(
        "xkeysib-123",
        logger=logging.getLogger(LOGGER_NAME),
        session=session,  # type: ignore[arg-type]
    )


def _records(caplog: pytest.LogCaptureFixture) -> List[logging.LogRecord]:
    return [r for r in caplog.records if r.name == LOGGER_NAME]


def test_payload_maps_addresses_and_marks_empty_fields_null() -> None:
    email = _email().add_bcc("bcc@example.com")

    payload = _sender(_FakeSession()).build_payload(email)

    assert payload == {
        "to": {"jane@example.com": "Jane", "joe@example.com": ""},
        "cc": None,
        "bcc": {"bcc@example.com": ""},
        "from": {"sender@example.com": "Sender"},
        "replyto": None,
        "subject": "Hello, world!",
        "text": "Hello World! How are you?",
        "html": None,
        "attachment": None,
        "inline_image": None,
    }


def test_attachments_are_base64_encoded_and_partitioned(tmp_path: Path) -> None:
    report = tmp_path / "report.pdf"
    report.write_bytes(b"%PDF-1.4")
    email = _email()
    email.add_attachment(Attachment("report.pdf", path=str(report)))
    email.add_attachment(Attachment("notes.txt", content=b"notes"))
    email.add_attachment(Attachment("logo.png", content_id="logo", content=b"\x89PNG"))
    email.add_attachment(Attachment("empty.txt"))
    email.add_attachment(Attachment("ghost.png", content_id="ghost"))

    payload = _sender(_FakeSession()).build_payload(email)

    assert payload["attachment"] == {
        "report.pdf": _b64(b"%PDF-1.4"),
        "notes.txt": _b64(b"notes"),
    }
    assert payload["inline_image"] == {"logo": _b64(b"\x89PNG")}


def test_path_is_preferred_over_content(tmp_path: Path) -> None:
    on_disk = tmp_path / "a.txt"
    on_disk.write_bytes(b"from disk")
    email = _email().add_attachment(
        Attachment("a.txt", path=str(on_disk), content=b"from memory")
    )

    payload = _sender(_FakeSession()).build_payload(email)

    assert payload["attachment"] == {"a.txt": _b64(b"from disk")}


def test_payload_is_repeatable() -> None:
    email = _email().add_attachment(
        Attachment("logo.png", content_id="logo", content=b"\x89PNG")
    )
    sender = _sender(_FakeSession())

    first = json.dumps(sender.build_payload(email), sort_keys=True)
    second = json.dumps(sender.build_payload(email), sort_keys=True)

    assert first == second


def test_success_posts_json_and_logs_subject(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    session = _FakeSession()
    email = _email()

    _sender(session).send(email)

    url, kwargs = session.calls[0]
    assert url == "https://api.sendinblue.com/v2.0/email"
    assert kwargs["headers"] == {"api-key": "xkeysib-123"}
    assert kwargs["json"]["subject"] == "Hello, world!"
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.INFO
    assert records[0].getMessage() == "Email sent: 'Hello, world!'"
    assert records[0].email is email


@pytest.mark.parametrize("code", ["failure", "error"])
def test_failure_codes_raise_invalid_request(
    code: str, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    session = _FakeSession({"code": code, "message": "to is missing"})

    with pytest.raises(InvalidRequestException) as info:
        _sender(session).send(_email())

    assert info.value.message == "to is missing"
    records = _records(caplog)
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].getMessage() == "Email error: 'to is missing'"


@pytest.mark.parametrize("body", [_NO_JSON, {}, {"message": "no code"}, [], None])
def test_missing_response_or_code_is_unknown_error(body: Any) -> None:
    session = _FakeSession()
    session.body = body

    with pytest.raises(EmailError) as info:
        _sender(session).send(_email())

    assert type(info.value) is EmailError
    assert info.value.code == UNKNOWN_ERROR_CODE
    assert info.value.message == "Unknown exception"


def test_unrecognized_code_is_unknown_error() -> None:
    session = _FakeSession({"code": "queued", "message": "later"})

    with pytest.raises(EmailError) as info:
        _sender(session).send(_email())

    assert type(info.value) is EmailError
    assert info.value.code == UNKNOWN_ERROR_CODE
    assert info.value.message == "later"


def test_transport_error_is_wrapped_with_cause(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    error = requests.Timeout("read timed out")

    with pytest.raises(EmailError) as info:
        _sender(_FakeSession(error=error)).send(_email())

    assert type(info.value) is EmailError
    assert info.value.__cause__ is error
    assert [r.getMessage() for r in _records(caplog)] == [
        "Email error: 'read timed out'"
    ]
