import asyncio
import logging
import smtplib
import threading
from email.message import EmailMessage

from config import Config


MAIL_TIMEOUT = 5.0  # seconds
logger = logging.getLogger("polldot:mail")

__all__ = ["MAIL_TIMEOUT", "MailError", "MailTimeoutError", "build_message", "send_mail"]


class MailError(Exception):
    pass


class MailTimeoutError(MailError):
    pass


def build_message(cfg: Config) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = cfg.mail_from
    msg["To"] = cfg.mail_to
    msg["Subject"] = cfg.subject
    msg.set_content(cfg.body)
    return msg


def send_mail_sync(cfg: Config, msg: EmailMessage):
    """Blocking send, run on its own thread by send_mail."""
    logger.debug("Connecting to SMTP %s:%s", cfg.host, cfg.port)
    with smtplib.SMTP(cfg.host, cfg.port) as server:
        server.send_message(msg)


async def send_mail(cfg: Config, timeout: float = MAIL_TIMEOUT):
    """
    Send the notification mail, giving up after `timeout` seconds.

    The blocking send runs on a daemon thread. On timeout that thread is
    abandoned rather than cancelled; it cannot keep the process alive.
    """
    loop = asyncio.get_running_loop()
    result: asyncio.Future = loop.create_future()
    try:
        msg = build_message(cfg)
    except ValueError as e:
        raise MailError(f"cannot build mail: {e}") from e

    def deliver(exc):
        if not result.done():
            result.set_result(exc)

    def worker():
        try:
            send_mail_sync(cfg, msg)
            exc = None
        except Exception as e:
            exc = e
        try:
            loop.call_soon_threadsafe(deliver, exc)
        except RuntimeError:
            # the loop is closed; nobody is waiting for this result
            logger.debug("mail result dropped: %s", exc)

    threading.Thread(target=worker, name="polldot-mail", daemon=True).start()

    try:
        exc = await asyncio.wait_for(result, timeout=timeout)
    except asyncio.TimeoutError:
        raise MailTimeoutError(f"mail timeout: {timeout}s") from None
    if exc is not None:
        raise MailError(str(exc) or type(exc).__name__) from exc
    logger.info("Mail sent to %s via %s:%s", cfg.mail_to, cfg.host, cfg.port)
