from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from ..errors import WeightError

FULL_WEIGHT = Decimal("100.00")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class KpiWeight:
    """One active KPI as seen by a school: its effective weight and evidence gate."""
    kpi_id: int
    name: str
    weight: float
    min_accepted_evidence: Optional[int] = None


@dataclass(frozen=True)
class WeightValidation:
    job_type_id: Optional[int]
    job_type_name: Optional[str]
    total_weight: float
    is_valid: bool

    def to_dict(self):
        return asdict(self)


def _exact(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() avoids carrying binary float noise into the Decimal
    return Decimal(str(value))


def to_decimal(value) -> Decimal:
    """Coerce a float / int / str / Decimal weight to a 2-place Decimal."""
    return _exact(value).quantize(CENT)


def sum_weights(weights: Iterable) -> Decimal:
    """Accumulate the exact weights, then round the total once."""
    total = Decimal("0")
    for w in weights:
        total += _exact(w)
    return total.quantize(CENT)


def validate_weights(kpis, job_type_id=None, job_type_name=None) -> WeightValidation:
    """Sum the weights of the active KPIs of one job type and compare to 100.

    ``kpis`` is any iterable of objects with a ``weight`` attribute. The total is
    accumulated as Decimal and rounded to 2 places, so 33.33 + 33.33 + 33.34 is
    exactly valid while 99.99 and 100.01 are not. An empty list is invalid
    (total 0).
    """
    total = sum_weights(k.weight for k in kpis)
    return WeightValidation(
        job_type_id=job_type_id,
        job_type_name=job_type_name,
        total_weight=float(total),
        is_valid=total == FULL_WEIGHT,
    )


def check_weight_update(entries):
    """Validate a school's proposed weights before they are stored.

    ``entries`` is a list of dicts ``{"kpi_id", "weight", "is_active"}``. Each
    weight must be within 0..100 and the active total may be below 100 (KPIs
    being switched off) but never above it. Returns the active total.
    """
    if not isinstance(entries, list) or not entries:
        raise WeightError("weights must be a non-empty list")

    seen = set()
    active = []
    for entry in entries:
        if not isinstance(entry, dict) or not entry.get("kpi_id"):
            raise WeightError("every weight entry needs a kpi_id")
        kpi_id = entry["kpi_id"]
        if kpi_id in seen:
            raise WeightError(f"duplicate weight entry for KPI {kpi_id}", kpi_id=kpi_id)
        seen.add(kpi_id)
        try:
            weight = to_decimal(entry.get("weight"))
        except (InvalidOperation, ValueError, TypeError):
            raise WeightError(f"weight for KPI {kpi_id} is not a number", kpi_id=kpi_id)
        if weight < 0 or weight > FULL_WEIGHT:
            raise WeightError(f"weight for KPI {kpi_id} must be between 0 and 100", kpi_id=kpi_id)
        if entry.get("is_active", True) is not False:
            active.append(entry.get("weight"))

    total = sum_weights(active)
    if total > FULL_WEIGHT:
        raise WeightError(
            f"active KPI weights add up to {total}%, more than 100%",
            total_weight=float(total),
        )
    return float(total)
