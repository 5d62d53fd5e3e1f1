"""
Mail Tests

The SMTP client is replaced by fakes, except for the refused-connection case
which talks to a closed local port.
"""

import smtplib
import socket
import threading

import pytest

from config import Config
from utils import mail_utils
from utils.mail_utils import MailError, MailTimeoutError, build_message, send_mail


CFG = Config(
    mail_from="root@localhost",
    mail_to="root@localhost",
    subject="mail from polldot test",
    body="test run",
    host="127.0.0.1",
    port=2525,
)


class FakeSMTP:
    sent = []
    refuse = None

    def __init__(self, host, port):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def send_message(self, msg):
        if FakeSMTP.refuse is not None:
            raise FakeSMTP.refuse
        FakeSMTP.sent.append((self.host, self.port, msg))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.sent = []
    FakeSMTP.refuse = None
    monkeypatch.setattr(mail_utils.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def closed_port() -> int:
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def test_build_message():
    msg = build_message(CFG)
    assert msg["From"] == "root@localhost"
    assert msg["To"] == "root@localhost"
    assert msg["Subject"] == "mail from polldot test"
    assert msg.get_content_type() == "text/plain"
    assert msg.get_content().strip() == "test run"


async def test_send(fake_smtp):
    await send_mail(CFG)
    assert len(fake_smtp.sent) == 1
    host, port, msg = fake_smtp.sent[0]
    assert (host, port) == ("127.0.0.1", 2525)
    assert msg["Subject"] == CFG.subject


async def test_recipient_rejected(fake_smtp):
    fake_smtp.refuse = smtplib.SMTPRecipientsRefused({"bad!recip$ient": (550, b"no such user")})
    with pytest.raises(MailError) as exc:
        await send_mail(CFG)
    assert isinstance(exc.value.__cause__, smtplib.SMTPRecipientsRefused)
    assert not isinstance(exc.value, MailTimeoutError)


async def test_no_server():
    cfg = CFG.model_copy(update={"port": closed_port()})
    with pytest.raises(MailError) as exc:
        await send_mail(cfg)
    assert isinstance(exc.value.__cause__, ConnectionRefusedError)


async def test_timeout(monkeypatch):
    """A server that never answers is abandoned after the timeout"""
    release = threading.Event()

    class HangingSMTP(FakeSMTP):
        def __init__(self, host, port):
            release.wait(5)
            super().__init__(host, port)

    monkeypatch.setattr(mail_utils.smtplib, "SMTP", HangingSMTP)
    try:
        with pytest.raises(MailTimeoutError, match="mail timeout"):
            await send_mail(CFG, timeout=0.1)
    finally:
        release.set()


async def test_newline_in_subject(fake_smtp):
    """Header values with line breaks fail as a mail error, before sending"""
    cfg = CFG.model_copy(update={"subject": "line one\nline two"})
    with pytest.raises(MailError, match="cannot build mail") as exc:
        await send_mail(cfg, timeout=1)
    assert isinstance(exc.value.__cause__, ValueError)
    assert fake_smtp.sent == []


async def test_unexpected_send_error_is_not_a_timeout(fake_smtp):
    fake_smtp.refuse = RuntimeError("server said something odd")
    with pytest.raises(MailError, match="server said something odd") as exc:
        await send_mail(CFG, timeout=1)
    assert not isinstance(exc.value, MailTimeoutError)
    assert isinstance(exc.value.__cause__, RuntimeError)
