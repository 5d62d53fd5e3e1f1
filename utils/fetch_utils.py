import logging

import httpx


SENTINEL = b"."
FETCH_TIMEOUT = 30
logger = logging.getLogger("polldot:fetch")

__all__ = ["FETCH_TIMEOUT", "FetchError", "fetch_sentinel"]


class FetchError(Exception):
    pass


async def fetch_sentinel(client: httpx.AsyncClient, url: str) -> None:
    """
    Retrieve `url` and check that its body starts with '.'.

    Raises FetchError if the file cannot be retrieved, is empty, or starts
    with anything else. Most webservers answer a missing file with some
    html, in which case the first character is typically '<'.
    """
    logger.debug("GET %s", url)
    try:
        async with client.stream("GET", url) as r:
            first = b""
            async for chunk in r.aiter_bytes():
                if chunk:
                    first = chunk[:1]
                    break
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        raise FetchError(f"fetch {url} failed: {e}") from e

    if not first:
        raise FetchError("no content")
    if first != SENTINEL:
        raise FetchError(f"got '{first.decode('latin-1')}'")
