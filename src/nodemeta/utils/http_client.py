import logging

import httpx

from ..core.config import config

logger = logging.getLogger(__name__)


def get_async_http_client(
    base_url: str = "",
    connect_timeout: float = None,
    read_timeout: float = None,
) -> httpx.AsyncClient:
    """
    Returns a configured httpx.AsyncClient with:
    - Default timeouts (connect and read).
    - Standard User-Agent header.
    """
    c_timeout = connect_timeout if connect_timeout is not None else config.DEFAULT_TIMEOUT_CONNECT
    r_timeout = read_timeout if read_timeout is not None else config.DEFAULT_TIMEOUT_READ

    timeout = httpx.Timeout(r_timeout, connect=c_timeout)

    headers = {"User-Agent": config.USER_AGENT}

    # Note: httpx does not have built-in retry logic like requests' HTTPAdapter.
    # Retrying is left to the callers of this package.
    logger.debug("Creating async http client for %s", base_url or "<no base url>")

    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        headers=headers,
        # The metadata service never redirects; a redirect means a proxy is in the way.
        follow_redirects=False,
    )
