"""
Registry session manager.

The registry only answers searches that carry the cookie it hands out on its
search-form page. One cookie is shared by every request in the process and
renewed after a fixed interval, or right away once the registry refuses it.

Concurrent callers that all see an expired session may all refresh; the last
cookie written wins. That costs at most a redundant GET.
"""
import logging
from datetime import datetime
from typing import Callable

import httpx

from errors import SessionError
from models import utcnow

logger = logging.getLogger(__name__)

BROWSER_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"


class SessionManager:
    def __init__(
        self,
        client: httpx.AsyncClient,
        form_url: str,
        user_agent: str,
        accept_language: str = "pt-BR,pt;q=0.9",
        refresh_interval: float = 15 * 60,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._client = client
        self.form_url = form_url
        self.user_agent = user_agent
        self.accept_language = accept_language
        self.refresh_interval = refresh_interval
        self._clock = clock

        self._cookie: str | None = None
        self._issued_at: datetime | None = None

    @property
    def cookie(self) -> str | None:
        return self._cookie

    @property
    def last_refresh(self) -> datetime | None:
        return self._issued_at

    @property
    def is_active(self) -> bool:
        return self._cookie is not None and not self._expired()

    def _expired(self) -> bool:
        if self._issued_at is None:
            return True
        elapsed = (self._clock() - self._issued_at).total_seconds()
        return elapsed > self.refresh_interval

    async def ensure_valid(self) -> str:
        """Return a usable session cookie, refreshing it first if needed."""
        cookie = self._cookie
        if cookie is None or self._expired():
            cookie = await self.refresh()
        return cookie

    async def refresh(self) -> str:
        """Open a fresh session by loading the registry's search-form page."""
        # The registry reuses any session it is handed; ask for a new one cookie-less
        self._client.cookies.clear()
        try:
            resp = await self._client.get(
                self.form_url,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": BROWSER_ACCEPT,
                    "Accept-Language": self.accept_language,
                    "Connection": "keep-alive",
                },
            )
        except httpx.HTTPError as exc:
            logger.error("Session refresh failed: %s: %s", type(exc).__name__, exc)
            raise SessionError("Could not open a session with the registry") from exc

        if not resp.is_success:
            logger.error("Session refresh failed: registry returned HTTP %s", resp.status_code)
            raise SessionError(f"Registry returned HTTP {resp.status_code} while opening a session")

        cookie = _first_cookie(resp)
        if cookie is None:
            logger.error("Session refresh failed: no cookie in registry response")
            raise SessionError("Registry did not return a session cookie")

        self._cookie = cookie
        self._issued_at = self._clock()
        logger.info("Registry session refreshed")
        return cookie

    def invalidate(self) -> None:
        """Drop the cookie so the next ensure_valid() opens a new session."""
        if self._cookie is not None:
            logger.warning("Registry session invalidated")
        self._cookie = None
        self._client.cookies.clear()


def _first_cookie(resp: httpx.Response) -> str | None:
    """
    "name=value" of the first Set-Cookie header, looking through any
    redirects that led to the final response.
    """
    for r in (*resp.history, resp):
        for header in r.headers.get_list("set-cookie"):
            pair = header.split(";", 1)[0].strip()
            if pair:
                return pair
    return None
