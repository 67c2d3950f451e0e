import logging
from typing import Optional

import httpx

from insta_short.utils import Config, SubmitResult

logger = logging.getLogger(__name__)


# ========== Shortening service client ==========
class HttpClient:
    """Async client for the link-shortening service.

    Transport failures are reported through :class:`SubmitResult` with
    ``status_code=None`` instead of being raised.
    """

    def __init__(self, cfg: Config, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = cfg
        self._client = httpx.AsyncClient(
            timeout=cfg.timeout,
            verify=cfg.verify_tls,
            follow_redirects=True,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def shorten(self, long_url: str) -> SubmitResult:
        params = {"api": self.cfg.api_key, "url": long_url}
        logger.debug("GET %s url=%s", self.cfg.api_url, long_url)
        try:
            resp = await self._client.get(self.cfg.api_url, params=params)
        except httpx.TimeoutException as e:
            logger.warning("Request to %s timed out after %ss", self.cfg.api_url, self.cfg.timeout)
            return SubmitResult(ok=False, status_code=None, text="", error=repr(e), timed_out=True)
        except httpx.HTTPError as e:
            logger.warning("Request to %s failed: %r", self.cfg.api_url, e)
            return SubmitResult(ok=False, status_code=None, text="", error=repr(e))

        logger.debug("Status: %s Response: %s", resp.status_code, resp.text)
        return SubmitResult(ok=resp.is_success, status_code=resp.status_code, text=resp.text)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
