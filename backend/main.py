import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from config import settings
from errors import AnalysisError, ValidationError
from models import SearchQuery, SearchResult, TrademarkAnalysis
from registry.cache import ResponseCache
from registry.client import RegistryClient, build_http_client
from registry.session import SessionManager
from services.analysis import AnalysisService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = build_http_client(
        timeout=settings.request_timeout,
        max_redirects=settings.max_redirects,
    )
    session = SessionManager(
        client,
        form_url=settings.registry_form_url,
        user_agent=settings.user_agent,
        accept_language=settings.accept_language,
        refresh_interval=settings.session_refresh_interval,
    )
    registry = RegistryClient(
        client,
        session,
        search_url=settings.registry_search_url,
        max_attempts=settings.captcha_max_attempts,
        retry_delay=settings.captcha_retry_delay,
        timeout=settings.request_timeout,
    )
    cache = ResponseCache(ttl=settings.cache_ttl)

    app.state.analysis = AnalysisService(registry, cache, session)
    await app.state.analysis.prime()
    try:
        yield
    finally:
        await client.aclose()


app = FastAPI(title="Trademark Viability", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(AnalysisError)
async def _analysis_error(request: Request, exc: AnalysisError):
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Internal error while processing the search"},
    )


@app.exception_handler(RequestValidationError)
async def _bad_body(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message},
    )


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal error while processing the search"},
    )


# ---------------------------------------------------------------------------
# Wire schemas
# ---------------------------------------------------------------------------

class SearchRequest(BaseModel):
    marca: str | None = None
    ncl: str | None = None
    tipo: str | None = None
    pagina: int | None = None


class ProcessOut(BaseModel):
    numero: str
    marca: str
    situacao: str
    titular: str
    tipo: str


class SearchResponse(BaseModel):
    marca: str
    processos: list[ProcessOut]
    processos_total: int
    classe: str | None = None
    ncl: str | None = None

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResponse":
        return cls(
            marca=result.query_name,
            processos=[
                ProcessOut(
                    numero=c.registry_id,
                    marca=c.name,
                    situacao=c.status,
                    titular=c.owner,
                    tipo=c.mark_type,
                )
                for c in result.candidates
            ],
            processos_total=result.total_count,
            classe=result.class_label,
            ncl=result.class_code,
        )


class TimelineStepOut(BaseModel):
    phase: str
    estimatedDuration: int = Field(description="Months")
    description: str
    status: str


class SimilarityResultOut(BaseModel):
    name: str
    similarity: int
    status: str
    registrationNumber: str | None = None


class AnalysisResponse(BaseModel):
    name: str
    score: int
    timeline: list[TimelineStepOut]
    similarityResults: list[SimilarityResultOut]
    recommendations: list[str]

    @classmethod
    def from_analysis(cls, analysis: TrademarkAnalysis) -> "AnalysisResponse":
        return cls(
            name=analysis.name,
            score=analysis.viability_score,
            timeline=[
                TimelineStepOut(
                    phase=s.phase,
                    estimatedDuration=s.estimated_duration_months,
                    description=s.description,
                    status=s.status,
                )
                for s in analysis.timeline
            ],
            similarityResults=[
                SimilarityResultOut(
                    name=r.name,
                    similarity=r.similarity_percent,
                    status=r.status,
                    registrationNumber=r.registration_number,
                )
                for r in analysis.similarity_results
            ],
            recommendations=list(analysis.recommendations),
        )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.post("/api/search", response_model=SearchResponse)
async def search(
    req: SearchRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    query = SearchQuery.create(req.marca, class_code=req.ncl, mark_type=req.tipo, page=req.pagina)
    result = await service.search(query)
    return SearchResponse.from_result(result)


@app.post("/api/analyze", response_model=AnalysisResponse)
async def analyze(
    req: SearchRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    analysis = await service.analyze(req.marca, class_code=req.ncl, mark_type=req.tipo, page=req.pagina)
    return AnalysisResponse.from_analysis(analysis)


@app.get("/health")
async def health(service: AnalysisService = Depends(get_analysis_service)):
    return service.health()
