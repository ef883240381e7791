import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Literal

from errors import ValidationError

DEFAULT_MARK_TYPE = "unspecified"

TimelineStatus = Literal["pending", "in-progress", "completed"]


def utcnow():
    return datetime.now(timezone.utc)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass(frozen=True)
class SearchQuery:
    """Parameters of one registry search. Equal queries share a cache key."""
    name: str
    class_code: str | None = None
    mark_type: str | None = None
    page: int = 1

    @classmethod
    def create(
        cls,
        name: str | None,
        class_code: str | None = None,
        mark_type: str | None = None,
        page: int | None = None,
    ) -> "SearchQuery":
        name = (name or "").strip()
        if not name:
            raise ValidationError("Trademark name is required")
        if not page:
            page = 1
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValidationError("Page must be a positive integer")
        return cls(
            name=name,
            class_code=_blank_to_none(class_code),
            mark_type=_blank_to_none(mark_type),
            page=page,
        )

    def cache_key(self) -> str:
        return json.dumps(asdict(self), sort_keys=True, separators=(",", ":"))


@dataclass(frozen=True)
class CandidateMark:
    """One row of the registry's results table."""
    registry_id: str
    name: str
    status: str          # free-text status label, e.g. "Registro vigente"
    owner: str
    mark_type: str = DEFAULT_MARK_TYPE


@dataclass(frozen=True)
class SearchResult:
    query_name: str
    candidates: tuple[CandidateMark, ...] = ()
    total_count: int = 0
    class_label: str | None = None
    class_code: str | None = None


@dataclass(frozen=True)
class SimilarityResult:
    name: str
    similarity_percent: int   # 0 – 100
    status: str
    registration_number: str | None = None


@dataclass(frozen=True)
class TimelineStep:
    phase: str
    estimated_duration_months: int
    description: str
    status: TimelineStatus = "pending"


@dataclass(frozen=True)
class ScoreReport:
    """Output of the scoring engine, before it is attached to a name."""
    viability_score: int
    similarity_results: tuple[SimilarityResult, ...]
    recommendations: tuple[str, ...]
    timeline: tuple[TimelineStep, ...]


@dataclass(frozen=True)
class TrademarkAnalysis:
    name: str
    viability_score: int
    timeline: tuple[TimelineStep, ...] = field(default_factory=tuple)
    similarity_results: tuple[SimilarityResult, ...] = field(default_factory=tuple)
    recommendations: tuple[str, ...] = field(default_factory=tuple)
