"""Pure scoring functions: per-KPI score, teacher overall score, evidence progress.

Nothing here touches the database; callers hand in the KPI and submission rows
they have read. Same input always gives the same output.
"""
from dataclasses import dataclass, asdict, field
from typing import List, Optional

from ..models.submission import SubmissionStatus
from .weights import WeightValidation

MAX_RATING = 5.0


@dataclass(frozen=True)
class KpiScore:
    kpi_id: int
    name: str
    weight: float
    score: float
    approved_evidence_count: int
    pending_evidence_count: int
    rejected_evidence_count: int
    min_accepted_evidence: Optional[int] = None

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class OverallScore:
    overall_score: float
    overall_percentage: float
    weights_info: Optional[WeightValidation] = None
    kpis: List[KpiScore] = field(default_factory=list)

    @property
    def is_accurate(self):
        # weights not adding up to 100 still produce a number, just flagged
        return self.weights_info is None or self.weights_info.is_valid

    def to_dict(self):
        return {
            "overall_score": round(self.overall_score, 2),
            "overall_percentage": round(self.overall_percentage, 2),
            "is_accurate": self.is_accurate,
            "weights_info": self.weights_info.to_dict() if self.weights_info else None,
            "kpis": [k.to_dict() for k in self.kpis],
        }


@dataclass(frozen=True)
class KpiProgress:
    remaining_count: int
    is_achieved: bool

    def to_dict(self):
        return asdict(self)


def _clamp(value, lo, hi):
    return max(lo, min(hi, value))


def kpi_score(kpi, submissions) -> KpiScore:
    """Score one KPI for one teacher from that teacher's submissions against it.

    ``kpi`` is a KpiWeight; ``submissions`` are objects with ``status`` and
    ``rating``. The score is the mean rating of ACCEPTED submissions (0 when
    there are none); PENDING and REJECTED rows only feed the counts.
    """
    ratings = []
    counts = {s: 0 for s in SubmissionStatus.ALL}
    for sub in submissions:
        if sub.status not in counts:
            continue
        counts[sub.status] += 1
        if sub.status == SubmissionStatus.ACCEPTED and sub.rating is not None:
            ratings.append(sub.rating)

    score = 0.0
    if ratings:
        score = _clamp(sum(ratings) / len(ratings), 0.0, MAX_RATING)

    return KpiScore(
        kpi_id=kpi.kpi_id,
        name=kpi.name,
        weight=float(kpi.weight),
        score=score,
        approved_evidence_count=counts[SubmissionStatus.ACCEPTED],
        pending_evidence_count=counts[SubmissionStatus.PENDING],
        rejected_evidence_count=counts[SubmissionStatus.REJECTED],
        min_accepted_evidence=kpi.min_accepted_evidence,
    )


def overall_score(kpi_scores, validation=None) -> OverallScore:
    """Weighted overall score: sum(score * weight / 100) on the 0..5 scale.

    Computed even when ``validation`` says the weights do not add up to 100;
    the result then reports ``is_accurate = False``.
    """
    kpi_scores = list(kpi_scores)
    total = sum(k.score * (k.weight / 100.0) for k in kpi_scores)
    percentage = total / MAX_RATING * 100.0
    return OverallScore(
        overall_score=_clamp(total, 0.0, MAX_RATING),
        overall_percentage=_clamp(percentage, 0.0, 100.0),
        weights_info=validation,
        kpis=kpi_scores,
    )


def kpi_progress(min_accepted_evidence, approved_count) -> KpiProgress:
    """Evidence-count gate of one KPI; no effect on the score."""
    if min_accepted_evidence is None or min_accepted_evidence <= 0:
        return KpiProgress(remaining_count=0, is_achieved=True)
    return KpiProgress(
        remaining_count=max(0, min_accepted_evidence - approved_count),
        is_achieved=approved_count >= min_accepted_evidence,
    )


def rank_teachers(rows, descending=True, limit=None, key="overall_score"):
    """Order teacher score rows (dicts) for the top / bottom views.

    The sort is stable, so equal scores keep the order the rows came in. A
    ``limit`` below 1 means no limit.
    """
    ranked = sorted(rows, key=lambda r: r.get(key) or 0.0, reverse=descending)
    if limit is not None and limit > 0:
        ranked = ranked[:limit]
    return ranked
