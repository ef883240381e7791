"""
Viability scoring engine.

Turns the candidate marks returned by the registry into a viability score,
a recommendation list and a projected processing timeline. Pure functions:
nothing here does I/O, and unknown status labels simply match no rule.
"""
from models import CandidateMark, ScoreReport, SimilarityResult, TimelineStep
from scoring.similarity import similarity

# ---------------------------------------------------------------------------
# Status labels used by the registry
# ---------------------------------------------------------------------------

# Marks that can still block a new filing
ACTIVE_STATUSES = frozenset({
    "Registro vigente",
    "Em exame de mérito",
})

# Third-party opposition pending; lengthens the publication phase
AWAITING_OPPOSITION_STATUS = "Aguardando análise de oposição"

NO_CONFLICTS_SCORE = 90
ONLY_INACTIVE_SCORE = 85

HIGH_RISK_BELOW = 40
GOOD_CHANCE_FROM = 70
HIGH_SIMILARITY_ABOVE = 60

# ---------------------------------------------------------------------------
# Recommendation texts
# ---------------------------------------------------------------------------

HIGH_RISK_RECOMMENDATIONS = (
    "High probability of refusal because of existing similar marks.",
    "Consider changing the mark name significantly.",
    "We recommend consulting an intellectual property specialist.",
)

MODERATE_RISK_RECOMMENDATIONS = (
    "Some similar marks exist and may lead to oppositions.",
    "Prepare evidence supporting the distinctiveness of your mark.",
    "Consider a detailed prior-art search before filing.",
)

LOW_RISK_RECOMMENDATIONS = (
    "Good chance of approval.",
    "We recommend proceeding with the registration application.",
)

HIGH_SIMILARITY_ALERT = "Warning: there are active marks with a high degree of similarity."


def score(
    candidates: list[CandidateMark] | tuple[CandidateMark, ...],
    query_name: str,
    class_code: str | None = None,
) -> ScoreReport:
    """
    Score a list of registry candidates against the name being filed.

    similarity_results keeps the order of `candidates`. The timeline always
    has five pending steps.
    """
    similarity_results = tuple(
        SimilarityResult(
            name=c.name,
            similarity_percent=similarity(c.name, query_name),
            status=c.status,
            registration_number=c.registry_id or None,
        )
        for c in candidates
    )

    viability = viability_score(similarity_results)
    return ScoreReport(
        viability_score=viability,
        similarity_results=similarity_results,
        recommendations=tuple(recommendations(viability, similarity_results, class_code)),
        timeline=timeline(viability, similarity_results),
    )


def _active(results) -> list[SimilarityResult]:
    return [r for r in results if r.status in ACTIVE_STATUSES]


def viability_score(results: tuple[SimilarityResult, ...]) -> int:
    if not results:
        return NO_CONFLICTS_SCORE

    active = _active(results)
    if not active:
        return ONLY_INACTIVE_SCORE

    highest = max(r.similarity_percent for r in active)
    return max(0, 100 - highest)


def recommendations(
    viability: int,
    results: tuple[SimilarityResult, ...],
    class_code: str | None = None,
) -> list[str]:
    notes: list[str] = []

    if class_code:
        notes.append(f"Your mark is being analysed for NCL class {class_code}.")

    if viability < HIGH_RISK_BELOW:
        notes.extend(HIGH_RISK_RECOMMENDATIONS)
    elif viability < GOOD_CHANCE_FROM:
        notes.extend(MODERATE_RISK_RECOMMENDATIONS)
    else:
        notes.extend(LOW_RISK_RECOMMENDATIONS)

    if any(r.similarity_percent > HIGH_SIMILARITY_ABOVE for r in _active(results)):
        notes.append(HIGH_SIMILARITY_ALERT)

    return notes


def timeline(viability: int, results: tuple[SimilarityResult, ...]) -> tuple[TimelineStep, ...]:
    """Static projection of the filing process; every step starts pending."""
    awaiting_opposition = any(r.status == AWAITING_OPPOSITION_STATUS for r in results)

    return (
        TimelineStep(
            phase="Filing",
            estimated_duration_months=1,
            description="Initial submission of the registration application",
        ),
        TimelineStep(
            phase="Formal Examination",
            estimated_duration_months=2,
            description="Check of the formal filing requirements",
        ),
        TimelineStep(
            phase="Publication",
            estimated_duration_months=4 if awaiting_opposition else 2,
            description="Publication for third-party oppositions",
        ),
        TimelineStep(
            phase="Substantive Examination",
            estimated_duration_months=18 if viability < GOOD_CHANCE_FROM else 12,
            description="Technical examination of the application",
        ),
        TimelineStep(
            phase="Decision",
            estimated_duration_months=1,
            description="Final decision on the registration",
        ),
    )
