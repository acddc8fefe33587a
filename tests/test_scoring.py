from types import SimpleNamespace

import pytest

from schoolkpi.models.submission import SubmissionStatus
from schoolkpi.services.scoring import kpi_progress, kpi_score, overall_score, rank_teachers, KpiScore
from schoolkpi.services.weights import KpiWeight, validate_weights

ACC = SubmissionStatus.ACCEPTED
PEN = SubmissionStatus.PENDING
REJ = SubmissionStatus.REJECTED


def _sub(status, rating=None):
    return SimpleNamespace(status=status, rating=rating)


def _ks(weight, score):
    return KpiScore(kpi_id=1, name="k", weight=weight, score=score,
                    approved_evidence_count=0, pending_evidence_count=0, rejected_evidence_count=0)


KPI = KpiWeight(kpi_id=7, name="Lesson planning", weight=40, min_accepted_evidence=3)


def test_kpi_score_averages_accepted_ratings():
    out = kpi_score(KPI, [_sub(ACC, 3), _sub(ACC, 5)])
    assert out.score == 4.0
    assert out.approved_evidence_count == 2
    assert out.kpi_id == 7 and out.weight == 40.0


def test_kpi_score_is_zero_without_accepted_submissions():
    out = kpi_score(KPI, [_sub(PEN), _sub(REJ), _sub(REJ)])
    assert out.score == 0
    assert out.pending_evidence_count == 1
    assert out.rejected_evidence_count == 2
    assert out.approved_evidence_count == 0


def test_pending_and_rejected_never_change_the_score():
    base = kpi_score(KPI, [_sub(ACC, 2)])
    noisy = kpi_score(KPI, [_sub(ACC, 2), _sub(PEN), _sub(REJ)])
    assert base.score == noisy.score == 2.0
    total = noisy.approved_evidence_count + noisy.pending_evidence_count + noisy.rejected_evidence_count
    assert total == 3


def test_overall_score_is_weighted_mean():
    out = overall_score([_ks(40, 5), _ks(60, 2.5)], validate_weights([_ks(40, 5), _ks(60, 2.5)]))
    assert out.overall_score == pytest.approx(3.5)
    assert out.overall_percentage == pytest.approx(70.0)
    assert out.is_accurate is True


def test_overall_score_still_computed_when_weights_invalid():
    scores = [_ks(40, 5), _ks(40, 5)]
    out = overall_score(scores, validate_weights(scores))
    assert out.overall_score == pytest.approx(4.0)
    assert out.is_accurate is False
    assert out.to_dict()["weights_info"]["total_weight"] == 80.0


def test_overall_score_is_clamped():
    out = overall_score([_ks(150, 5)])
    assert out.overall_score == 5.0
    assert out.overall_percentage == 100.0


def test_progress_with_minimum():
    p = kpi_progress(3, 1)
    assert (p.remaining_count, p.is_achieved) == (2, False)
    p = kpi_progress(3, 3)
    assert (p.remaining_count, p.is_achieved) == (0, True)
    p = kpi_progress(3, 5)
    assert (p.remaining_count, p.is_achieved) == (0, True)


@pytest.mark.parametrize("minimum", [None, 0, -2])
@pytest.mark.parametrize("approved", [0, 4])
def test_progress_without_minimum_is_always_achieved(minimum, approved):
    p = kpi_progress(minimum, approved)
    assert p.is_achieved is True
    assert p.remaining_count == 0


def test_same_input_same_output():
    subs = [_sub(ACC, 4), _sub(PEN)]
    assert kpi_score(KPI, subs) == kpi_score(KPI, subs)


def test_rank_teachers_keeps_input_order_on_ties():
    rows = [
        {"name": "Amal", "overall_score": 3.0},
        {"name": "Badr", "overall_score": 4.5},
        {"name": "Dana", "overall_score": 3.0},
        {"name": "Hind", "overall_score": 1.0},
    ]
    top = [r["name"] for r in rank_teachers(rows)]
    assert top == ["Badr", "Amal", "Dana", "Hind"]
    bottom = [r["name"] for r in rank_teachers(rows, descending=False, limit=3)]
    assert bottom == ["Hind", "Amal", "Dana"]


@pytest.mark.parametrize("limit", [None, 0, -1])
def test_rank_teachers_ignores_non_positive_limit(limit):
    rows = [{"name": n, "overall_score": s} for n, s in (("Amal", 2.0), ("Badr", 1.0), ("Dana", 3.0))]
    assert [r["name"] for r in rank_teachers(rows, limit=limit)] == ["Dana", "Amal", "Badr"]
