import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from config import Config
from .config_utils import ConfigError, MIN_INTERVAL, load_config, resolve_interval
from .fetch_utils import FetchError, fetch_sentinel
from .mail_utils import MailError, send_mail
from .signal_utils import Requests


STATUS_EXIT = "exit."
STATUS_MAIL_SENT = "mail sent."
logger = logging.getLogger("polldot:poll")

__all__ = ["STATUS_EXIT", "STATUS_MAIL_SENT", "PollLoop"]


class PollLoop:
    """
    Waits for whichever comes first: a quit request, a reload request or
    the poll timer. A reload re-arms the timer from zero.

    run() returns after a quit request or after the first successful
    fetch, so at most one mail is sent per loop.
    """

    def __init__(
        self,
        cfg: Config,
        requests: Requests,
        client: httpx.AsyncClient,
        *,
        load_config: Callable[[], Config] = load_config,
        send_mail: Callable[[Config], Awaitable[None]] = send_mail,
        sleep: Optional[float] = None,
        min_interval: float = MIN_INTERVAL,
    ):
        self.requests = requests
        self.client = client
        self.load_config = load_config
        self.send_mail = send_mail
        self.sleep = sleep
        self.min_interval = min_interval
        self._set_config(cfg)

    def _set_config(self, cfg: Config):
        self.cfg = cfg
        self.interval = resolve_interval(cfg, self.min_interval, self.sleep)

    async def run(self) -> str:
        logger.info("Starting poll loop (interval %s sec) for %s", self.interval, self.cfg.url)
        while True:
            quit_wait = asyncio.ensure_future(self.requests.quit.get())
            reload_wait = asyncio.ensure_future(self.requests.reload.get())
            timer = asyncio.ensure_future(asyncio.sleep(self.interval))
            try:
                await asyncio.wait({quit_wait, reload_wait, timer}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for waiter in (quit_wait, reload_wait, timer):
                    waiter.cancel()

            if quit_wait.done() and not quit_wait.cancelled():
                return STATUS_EXIT

            if reload_wait.done() and not reload_wait.cancelled():
                self.reload()
                continue

            if timer.done() and not timer.cancelled():
                status = await self.cycle()
                if status is not None:
                    return status

    def reload(self):
        try:
            cfg = self.load_config()
        except (ConfigError, OSError) as e:
            logger.warning("not using new config. %s", e)
        else:
            self._set_config(cfg)
        logger.info("using configuration: %s", self.cfg)

    async def cycle(self) -> Optional[str]:
        """
        One fetch attempt. Returns None to keep polling, otherwise the
        terminal status.
        """
        cfg = self.cfg
        try:
            await fetch_sentinel(self.client, cfg.url)
        except FetchError as e:
            logger.info("%s", e)
            return None
        logger.info("fetch() success")

        try:
            await self.send_mail(cfg)
        except MailError as e:
            logger.error("mail failed: %s", e)
            return str(e)
        return STATUS_MAIL_SENT
