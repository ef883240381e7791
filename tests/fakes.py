"""Canned registry pages, a fake registry server and controllable clocks."""

from datetime import datetime, timedelta, timezone

import httpx

from errors import RegistryError
from models import SearchQuery, SearchResult
from registry import parser

FORM_URL = "https://registry.test/pePI/jsp/marcas/Pesquisa_classe_basica.jsp"
SEARCH_URL = "https://registry.test/pePI/servlet/MarcasServletController"


RESULTS_PAGE = """
<html><body>
  <div class="classe-nice">NCL(12) 25 - Vestuário</div>
  <div class="resultado-busca">Foram encontrados 3 processos</div>
  <table class="tabela-processo">
    <tr><th>Número</th><th>Marca</th><th>Situação</th><th>Titular</th><th>Tipo</th></tr>
    <tr>
      <td>912345678</td><td>SOLARIS</td><td>Registro vigente</td>
      <td>Solaris Ltda</td><td>Nominativa</td>
    </tr>
    <tr>
      <td>923456789</td><td>SOLAR  MODA</td><td>Arquivado</td><td>Maria Silva</td>
    </tr>
    <tr><td>999</td><td>partial row</td></tr>
  </table>
</body></html>
"""

EMPTY_PAGE = """
<html><body>
  <div class="resultado-busca">Nenhum resultado</div>
  <table class="tabela-processo">
    <tr><th>Número</th><th>Marca</th><th>Situação</th><th>Titular</th></tr>
  </table>
</body></html>
"""

CAPTCHA_PAGE = """
<html><body>
  <form name="captcha" action="/pePI/captcha"><img src="captcha.jpg"></form>
</body></html>
"""


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeMonotonic:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSleep:
    """Records requested delays instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeRegistry:
    """
    Serves the registry's form page (GET) and search servlet (POST).

    Search pages are served in order; the last one repeats. Each form page
    hit issues a new cookie: JSESSIONID=session-1, session-2, ...
    """

    def __init__(self, pages: list[str] | None = None):
        self.pages = list(pages or [RESULTS_PAGE])
        self.issue_cookies = True
        # Like a servlet container: a request that already carries a cookie keeps its session
        self.reuse_sessions = False
        self.form_status = 200
        self.search_status = 200
        self.search_content_type = "text/html; charset=utf-8"
        self.search_error: type[httpx.RequestError] | None = None
        self.form_requests: list[httpx.Request] = []
        self.search_requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.form_requests.append(request)
            headers = []
            reused = self.reuse_sessions and "cookie" in request.headers
            if self.issue_cookies and not reused:
                headers.append(("set-cookie", f"JSESSIONID=session-{len(self.form_requests)}; Path=/pePI"))
            return httpx.Response(self.form_status, headers=headers, html="<html>form</html>")

        self.search_requests.append(request)
        if self.search_error is not None:
            raise self.search_error("registry unavailable", request=request)
        page = self.pages.pop(0) if len(self.pages) > 1 else self.pages[0]
        return httpx.Response(
            self.search_status,
            headers={"content-type": self.search_content_type},
            content=page.encode("utf-8"),
        )

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class SpyRegistryClient:
    """Registry client double that counts searches and never touches the network."""

    def __init__(self, page: str = RESULTS_PAGE):
        self.page = page
        self.calls: list[SearchQuery] = []
        self.error: Exception | None = None

    async def search(self, query: SearchQuery) -> SearchResult:
        self.calls.append(query)
        if self.error is not None:
            raise self.error
        return parser.parse_search_page(self.page, query)


class StubSession:
    def __init__(self, last_refresh: datetime | None = None, error: RegistryError | None = None):
        self.last_refresh = last_refresh
        self.error = error
        self.ensure_calls = 0

    @property
    def is_active(self) -> bool:
        return self.last_refresh is not None

    async def ensure_valid(self) -> str:
        self.ensure_calls += 1
        if self.error is not None:
            raise self.error
        self.last_refresh = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return "JSESSIONID=stub"
