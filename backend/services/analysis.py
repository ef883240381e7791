"""
Trademark analysis service.

Single entry point for the HTTP layer:
validate → cached registry search → scoring → TrademarkAnalysis.
No retries happen here beyond the registry client's own CAPTCHA handling.
"""
import logging

from errors import AnalysisError, RegistryError
from models import SearchQuery, SearchResult, TrademarkAnalysis
from registry.cache import ResponseCache
from registry.client import RegistryClient
from registry.session import SessionManager
from scoring import engine

logger = logging.getLogger(__name__)


class AnalysisService:
    def __init__(self, registry: RegistryClient, cache: ResponseCache, session: SessionManager):
        self._registry = registry
        self._cache = cache
        self._session = session

    async def prime(self) -> None:
        """Open the first registry session at startup. Failure is not fatal."""
        try:
            await self._session.ensure_valid()
        except RegistryError as exc:
            logger.warning("Could not open registry session at startup: %s", exc)

    async def search(self, query: SearchQuery) -> SearchResult:
        """Cache-backed registry search. Registry failures surface as AnalysisError."""
        try:
            return await self._cache.get_or_fetch(query, self._registry.search)
        except RegistryError as exc:
            logger.exception("Registry search for %r failed", query.name)
            raise AnalysisError(str(exc)) from exc

    async def analyze(
        self,
        name: str,
        class_code: str | None = None,
        mark_type: str | None = None,
        page: int | None = None,
    ) -> TrademarkAnalysis:
        query = SearchQuery.create(name, class_code=class_code, mark_type=mark_type, page=page)
        result = await self.search(query)

        report = engine.score(result.candidates, query.name, class_code=query.class_code)
        return TrademarkAnalysis(
            name=query.name,
            viability_score=report.viability_score,
            timeline=report.timeline,
            similarity_results=report.similarity_results,
            recommendations=report.recommendations,
        )

    def health(self) -> dict:
        last_refresh = self._session.last_refresh
        return {
            "status": "ok",
            "sessionActive": self._session.is_active,
            "lastSessionRefresh": last_refresh.isoformat() if last_refresh else None,
            "cacheSize": self._cache.size,
        }
