"""
Trademark registry search client.

Posts the basic-search form to the registry servlet with the shared session
cookie and turns the HTML answer into a SearchResult.

Only the CAPTCHA path is retried: the registry sometimes serves a challenge
page instead of results, and it usually goes away after a short wait.
Timeouts and connection failures are raised immediately.
"""
import asyncio
import logging
from typing import Awaitable, Callable

import httpx
from bs4 import BeautifulSoup

from errors import CaptchaError, ParseError, RegistryTimeoutError, UpstreamError
from models import SearchQuery, SearchResult
from registry import parser
from registry.session import BROWSER_ACCEPT, SessionManager

logger = logging.getLogger(__name__)

# The registry signals a rejected session with these
AUTH_DENIED_STATUSES = {401, 403}


def build_http_client(
    timeout: float = 30.0,
    max_redirects: int = 5,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Shared HTTP client for all registry traffic."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        transport=transport,
    )


class RegistryClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        session: SessionManager,
        search_url: str,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        timeout: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self._session = session
        self.search_url = search_url
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._sleep = sleep

    async def search(self, query: SearchQuery) -> SearchResult:
        soup = await self._fetch_past_captcha(query)
        result = parser.parse_search_page(soup, query)
        logger.info(
            "Registry search for %r returned %d candidate(s), total %d",
            query.name, len(result.candidates), result.total_count,
        )
        return result

    async def _fetch_past_captcha(self, query: SearchQuery) -> BeautifulSoup:
        """
        Fetch the results page, retrying while the registry answers with a
        CAPTCHA. Raises CaptchaError once every attempt has been used.
        """
        for attempt in range(1, self.max_attempts + 1):
            soup = await self._fetch_page(query)
            if not parser.has_captcha(soup):
                return soup

            logger.warning(
                "CAPTCHA served for %r (attempt %d of %d)",
                query.name, attempt, self.max_attempts,
            )
            if attempt < self.max_attempts:
                await self._sleep(self.retry_delay)

        raise CaptchaError(self.max_attempts)

    async def _fetch_page(self, query: SearchQuery) -> BeautifulSoup:
        cookie = await self._session.ensure_valid()

        try:
            resp = await self._client.post(
                self.search_url,
                data=_form_fields(query),
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "User-Agent": self._session.user_agent,
                    "Accept": BROWSER_ACCEPT,
                    "Accept-Language": self._session.accept_language,
                    "Cookie": cookie,
                    "Referer": self._session.form_url,
                },
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise RegistryTimeoutError(
                f"Registry search timed out after {self.timeout:g} seconds"
            ) from exc
        except httpx.TooManyRedirects as exc:
            raise UpstreamError("Registry redirected too many times") from exc
        except httpx.RequestError as exc:
            raise UpstreamError(f"Registry request failed: {type(exc).__name__}: {exc}") from exc

        if resp.status_code in AUTH_DENIED_STATUSES:
            self._session.invalidate()
            raise UpstreamError(
                f"Registry refused the session (HTTP {resp.status_code})",
                status_code=resp.status_code,
            )
        if not resp.is_success:
            raise UpstreamError(
                f"Registry returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        content_type = resp.headers.get("content-type", "")
        if content_type and "html" not in content_type.lower():
            raise ParseError(f"Expected an HTML page, got {content_type!r}")
        if not resp.text.strip():
            raise ParseError("Registry returned an empty page")

        return parser.load(resp.text)


def _form_fields(query: SearchQuery) -> dict[str, str]:
    fields = {"Action": "SearchBasic", "marca": query.name}
    if query.class_code:
        fields["ncl"] = query.class_code
    if query.mark_type:
        fields["tipo"] = query.mark_type
    fields["pagina"] = str(query.page)
    return fields
