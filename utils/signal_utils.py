import asyncio
import logging
import signal
from typing import Optional


logger = logging.getLogger("polldot:signals")

__all__ = ["Requests", "SignalListener"]

RELOAD_SIGNALS = (signal.SIGHUP,)
QUIT_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGUSR1)


class Requests:
    """Single-slot reload and quit channels consumed by the poll loop."""

    def __init__(self):
        self.reload: asyncio.Queue = asyncio.Queue(maxsize=1)
        self.quit: asyncio.Queue = asyncio.Queue(maxsize=1)

    def request_reload(self):
        self._post(self.reload, "reload")

    def request_quit(self):
        self._post(self.quit, "quit")

    @staticmethod
    def _post(queue: asyncio.Queue, kind: str):
        try:
            queue.put_nowait(kind)
        except asyncio.QueueFull:
            logger.debug("%s request already pending", kind)


class SignalListener:
    """
    Translates SIGHUP into reload requests and SIGINT, SIGTERM and SIGUSR1
    into quit requests.
    """

    def __init__(self, requests: Requests, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.requests = requests
        self.loop = loop or asyncio.get_running_loop()
        self._installed = []

    def install(self):
        for sig in RELOAD_SIGNALS + QUIT_SIGNALS:
            self.loop.add_signal_handler(sig, self._handle, sig)
            self._installed.append(sig)
        logger.info("waiting for signals ...")

    def remove(self):
        while self._installed:
            self.loop.remove_signal_handler(self._installed.pop())

    def _handle(self, sig: signal.Signals):
        logger.info("received signal: %s", signal.Signals(sig).name)
        if sig in RELOAD_SIGNALS:
            self.requests.request_reload()
        else:
            self.requests.request_quit()
