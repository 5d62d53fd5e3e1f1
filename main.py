"""
polldot regularly polls for the existence and contents of a file offered
online by a webserver.

If the file starts with '.', a mail is sent and the program exits. Never
more than one mail is sent. If the file cannot be retrieved, or starts with
something else, the program waits for the next cycle and tries again.

The URL, the mail settings and the polling frequency are read from
~/.polldot.json; execution is logged to ~/polldot.log. The configuration is
loaded on startup and on SIGHUP. SIGINT, SIGTERM and SIGUSR1 make the
program exit.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

import httpx

from config import Config
from utils.config_utils import *
from utils.fetch_utils import FETCH_TIMEOUT
from utils.log_utils import init_log
from utils.poll_utils import *
from utils.signal_utils import Requests, SignalListener


logger = logging.getLogger("polldot:main")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="polldot", description="Poll a URL for '.' and send one mail.")
    parser.add_argument("--sleep", type=float, default=None, metavar="SECONDS",
                        help="duration between fetch cycles; overrides the configured cycle")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser.parse_args(argv)


async def run(cfg: Config, sleep: Optional[float] = None) -> str:
    requests = Requests()
    listener = SignalListener(requests)
    listener.install()
    try:
        async with httpx.AsyncClient(timeout=FETCH_TIMEOUT) as http_client:
            return await PollLoop(cfg, requests, http_client, sleep=sleep).run()
    finally:
        listener.remove()


def report(message: str):
    logger.info(message)
    print(message, file=sys.stderr)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        init_log(level=logging.DEBUG if args.verbose else logging.INFO)
    except (ConfigError, OSError) as e:
        print(f"polldot: cannot open log file: {e}", file=sys.stderr)
        return 1
    logger.info("")
    logger.info("polldot started")

    try:
        cfg = load_config()
    except VanillaConfigError as e:
        report(str(e))
        return 2
    except (ConfigError, OSError) as e:
        report(str(e))
        return 1
    logger.info("using configuration: %s", cfg)

    status = asyncio.run(run(cfg, args.sleep))

    report(status)
    return 0 if status in (STATUS_EXIT, STATUS_MAIL_SENT) else 1


if __name__ == "__main__":
    raise SystemExit(main())
