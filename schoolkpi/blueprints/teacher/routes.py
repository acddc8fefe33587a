from flask import jsonify, request
from flask_login import login_required, current_user
from . import bp
from .forms import SubmitEvidenceForm
from ...models.submission import EvidenceSubmission, SubmissionStatus
from ...services import catalog, engine
from ...services.submissions import submit_evidence
from ...utils.decorators import teacher_required, school_required
from ...utils.pagination import paginate


@bp.get("/dashboard")
@login_required
@teacher_required
@school_required
def dashboard():
    result = engine.get_teacher_overall_score(current_user.id)
    counts = {}
    for status in SubmissionStatus.ALL:
        counts[status.lower()] = EvidenceSubmission.query.filter_by(teacher_id=current_user.id, status=status).count()
    data = result.to_dict()
    return jsonify({
        "stats": counts,
        "overall_score": {"score": data["overall_score"], "percentage": data["overall_percentage"]},
        "is_accurate": data["is_accurate"],
        "kpi_scores": data["kpis"],
        "weights_info": data["weights_info"],
    })


@bp.get("/kpis")
@login_required
@teacher_required
@school_required
def list_kpis():
    if not current_user.job_type_id:
        return jsonify({"error": "no job type assigned"}), 400
    out = []
    for k in catalog.active_kpis(current_user.job_type_id, current_user.school_id):
        out.append({
            "kpi_id": k.kpi_id,
            "name": k.name,
            "weight": k.weight,
            "min_accepted_evidence": k.min_accepted_evidence,
            "evidence": [{"id": e.id, "name": e.name} for e in catalog.visible_evidence(k.kpi_id, current_user.school_id)],
        })
    return jsonify(out)


@bp.post("/evidence/submit")
@login_required
@teacher_required
@school_required
def submit():
    form = SubmitEvidenceForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid submission", "fields": form.errors}), 400
    sub = submit_evidence(
        current_user,
        form.kpi_id.data,
        form.evidence_id.data,
        form.file_url.data.strip(),
        form.description.data,
    )
    return jsonify(sub.to_dict()), 201


@bp.get("/submissions")
@login_required
@teacher_required
def submissions():
    q = EvidenceSubmission.query.filter_by(teacher_id=current_user.id)
    status = (request.args.get("status") or "").upper()
    if status in SubmissionStatus.ALL:
        q = q.filter_by(status=status)
    q = q.order_by(EvidenceSubmission.created_at.desc(), EvidenceSubmission.id.desc())
    return jsonify(paginate(q))


@bp.get("/progress")
@login_required
@teacher_required
@school_required
def progress():
    return jsonify({"kpis": engine.get_teacher_progress(current_user.id)})
