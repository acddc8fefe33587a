from collections import OrderedDict

from flask import abort, jsonify, request
from flask_login import current_user
from . import bp
from .forms import ReviewForm, SchoolEvidenceForm, SchoolKpiForm, TeacherForm, TeacherUpdateForm
from ...models.job_type import JobType
from ...models.submission import EvidenceSubmission, SubmissionStatus
from ...models.user import User, Role
from ...errors import DataUnavailable, WeightError
from ...services import catalog, engine, teachers
from ...services.school_kpis import (
    add_school_evidence, create_school_kpi, customize_kpi, delete_school_evidence, rename_school_evidence,
    save_school_weights,
)
from ...services.scoring import kpi_progress, rank_teachers
from ...services.submissions import review_submission
from ...utils.json_body import json_bool
from ...utils.pagination import paginate


@bp.before_request
def _guard():
    # every school route is manager-only and school-scoped
    if not current_user.is_authenticated:
        abort(401)
    if current_user.role != Role.SCHOOL_MANAGER:
        abort(403)
    if not current_user.school_id:
        abort(400, description="user has no school assigned")


def _job_type_weights(job_type_ids):
    return [engine.get_weight_validation(jt_id, current_user.school_id).to_dict()
            for jt_id in sorted({j for j in job_type_ids if j})]


@bp.get("/teachers/scores")
def teacher_scores():
    rows, weights = engine.get_school_scores(current_user.school_id)
    order = request.args.get("order")
    limit = request.args.get("limit", type=int)
    if order in ("top", "bottom"):
        rows = rank_teachers(rows, descending=(order == "top"), limit=limit)
    return jsonify({"teachers": rows, "job_types_weights": weights})


@bp.get("/teachers/<int:teacher_id>/score")
def teacher_score(teacher_id):
    teacher = catalog.get_teacher(teacher_id, school_id=current_user.school_id)
    result = engine.get_teacher_overall_score(teacher.id, teacher=teacher)
    data = result.to_dict()
    for k in data["kpis"]:
        k["score"] = round(k["score"], 2)
        k.update(kpi_progress(k["min_accepted_evidence"], k["approved_evidence_count"]).to_dict())
    data.update(teacher_id=teacher.id, teacher_name=teacher.name,
                job_type=teacher.job_type.name if teacher.job_type else None)
    return jsonify(data)


@bp.get("/teachers/<int:teacher_id>/kpis/<int:kpi_id>")
def teacher_kpi(teacher_id, kpi_id):
    catalog.get_teacher(teacher_id, school_id=current_user.school_id)
    score = engine.get_kpi_score(teacher_id, kpi_id)
    progress = engine.get_kpi_progress(teacher_id, kpi_id)
    out = score.to_dict()
    out.update(progress.to_dict())
    return jsonify(out)


@bp.get("/evidence/pending")
def pending_evidence():
    q = (
        EvidenceSubmission.query
        .join(User, User.id == EvidenceSubmission.teacher_id)
        .filter(User.school_id == current_user.school_id, EvidenceSubmission.status == SubmissionStatus.PENDING)
        .order_by(EvidenceSubmission.created_at.desc(), EvidenceSubmission.id.desc())
    )

    def serialize(sub):
        out = sub.to_dict()
        out["teacher_name"] = sub.teacher.name
        return out

    data = paginate(q, serialize)
    data["job_types_weights"] = _job_type_weights(s.teacher.job_type_id for s in q.all())
    return jsonify(data)


@bp.post("/evidence/<int:submission_id>/review")
def review(submission_id):
    form = ReviewForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid review", "fields": form.errors}), 400
    sub = review_submission(
        current_user,
        submission_id,
        form.action.data,
        rating=form.rating.data,
        reject_reason=form.reject_reason.data,
    )
    return jsonify(sub.to_dict())


@bp.get("/job-types")
def job_types():
    rows = JobType.query.filter_by(active=True).order_by(JobType.name).all()
    return jsonify([{"id": jt.id, "name": jt.name} for jt in rows])


@bp.get("/kpis")
def list_kpis():
    job_type_id = request.args.get("job_type_id", type=int)
    if job_type_id:
        job_type_ids = [catalog.get_job_type(job_type_id).id]
    else:
        job_type_ids = [jt.id for jt in JobType.query.filter_by(active=True).order_by(JobType.name).all()]
    out = []
    for jt_id in job_type_ids:
        for row in catalog.kpi_weight_rows(jt_id, current_user.school_id):
            row["job_type_id"] = jt_id
            out.append(row)
    return jsonify(out)


@bp.post("/kpis")
def create_kpi():
    form = SchoolKpiForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid KPI", "fields": form.errors}), 400
    if not form.job_type_id.data or not form.name.data or form.weight.data is None:
        return jsonify({"error": "job_type_id, name and weight are required"}), 400
    kpi = create_school_kpi(
        current_user.school_id,
        form.job_type_id.data,
        form.name.data.strip(),
        form.weight.data,
        form.min_accepted_evidence.data,
    )
    return jsonify({"id": kpi.id, "name": kpi.name, "weight": float(kpi.weight)}), 201


@bp.put("/kpis/<int:kpi_id>")
def update_kpi(kpi_id):
    form = SchoolKpiForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid KPI", "fields": form.errors}), 400
    kpi = customize_kpi(
        current_user.school_id,
        kpi_id,
        name=(form.name.data or "").strip() or None,
        weight=form.weight.data,
        min_accepted_evidence=form.min_accepted_evidence.data,
    )
    return jsonify({
        "id": kpi.id,
        "name": kpi.name,
        "weight": float(kpi.weight),
        "min_accepted_evidence": kpi.min_accepted_evidence,
        "source_kpi_id": kpi.source_kpi_id,
    })


@bp.get("/job-types/<int:job_type_id>/kpis/weights")
def get_weights(job_type_id):
    rows = catalog.kpi_weight_rows(job_type_id, current_user.school_id)
    validation = engine.get_weight_validation(job_type_id, current_user.school_id)
    return jsonify({"kpis": rows, **validation.to_dict()})


@bp.put("/job-types/<int:job_type_id>/kpis/weights")
def put_weights(job_type_id):
    body = request.get_json(silent=True) or {}
    entries = body.get("weights") if isinstance(body, dict) else body
    if not isinstance(entries, list):
        raise WeightError("weights must be a list")
    cleaned = []
    for e in entries:
        if not isinstance(e, dict):
            raise WeightError("every weight entry must be an object")
        try:
            kpi_id = int(e.get("kpi_id"))
        except (TypeError, ValueError):
            raise WeightError("every weight entry needs a kpi_id")
        cleaned.append({"kpi_id": kpi_id, "weight": e.get("weight"), "is_active": e.get("is_active", True)})
    save_school_weights(current_user.school_id, job_type_id, cleaned)
    validation = engine.get_weight_validation(job_type_id, current_user.school_id)
    return jsonify({"kpis": catalog.kpi_weight_rows(job_type_id, current_user.school_id), **validation.to_dict()})


@bp.get("/job-types/<int:job_type_id>/kpis/weights/validate")
def validate_job_type_weights(job_type_id):
    return jsonify(engine.get_weight_validation(job_type_id, current_user.school_id).to_dict())


@bp.get("/reports")
def reports():
    subs = (
        EvidenceSubmission.query
        .join(User, User.id == EvidenceSubmission.teacher_id)
        .filter(User.school_id == current_user.school_id)
        .all()
    )
    summary = {"total": len(subs)}
    for status in SubmissionStatus.ALL:
        summary[status.lower()] = sum(1 for s in subs if s.status == status)

    activity = OrderedDict()
    for s in sorted(subs, key=lambda x: x.kpi.name):
        a = activity.setdefault(s.kpi.name, {"kpi_name": s.kpi.name, "total": 0, "accepted": 0, "rejected": 0, "pending": 0})
        a["total"] += 1
        a[s.status.lower()] += 1

    teachers = (
        User.query.filter_by(school_id=current_user.school_id, role=Role.TEACHER)
        .order_by(User.name, User.id).all()
    )
    averages = []
    for t in teachers:
        ratings = [s.rating for s in subs
                   if s.teacher_id == t.id and s.status == SubmissionStatus.ACCEPTED and s.rating is not None]
        averages.append({
            "teacher_id": t.id,
            "teacher_name": t.name,
            "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else 0,
            "accepted_submissions": len(ratings),
        })

    return jsonify({"summary": summary, "teacher_averages": averages, "kpi_activity": list(activity.values())})


@bp.get("/teachers")
def list_teachers():
    q = (
        User.query
        .filter_by(school_id=current_user.school_id, role=Role.TEACHER, status=True)
        .order_by(User.name, User.id)
    )

    def serialize(t):
        out = t.to_dict()
        out["job_type"] = t.job_type.name if t.job_type else None
        out["submission_count"] = EvidenceSubmission.query.filter_by(teacher_id=t.id).count()
        return out

    data = paginate(q, serialize)
    data["job_types_weights"] = _job_type_weights(t.job_type_id for t in q.all())
    return jsonify(data)


@bp.post("/teachers")
def create_teacher():
    form = TeacherForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid teacher", "fields": form.errors}), 400
    teacher = teachers.create_teacher(
        current_user.school_id,
        form.name.data.strip(),
        form.email.data,
        form.password.data,
        form.job_type_id.data,
    )
    return jsonify(teacher.to_dict()), 201


@bp.put("/teachers/<int:teacher_id>")
def update_teacher(teacher_id):
    form = TeacherUpdateForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid teacher", "fields": form.errors}), 400
    teacher = teachers.update_teacher(
        current_user.school_id,
        teacher_id,
        name=(form.name.data or "").strip() or None,
        job_type_id=form.job_type_id.data,
        status=json_bool(request.get_json(silent=True) or {}, "status"),
    )
    return jsonify(teacher.to_dict())


@bp.delete("/teachers/<int:teacher_id>")
def disable_teacher(teacher_id):
    return jsonify(teachers.disable_teacher(current_user.school_id, teacher_id).to_dict())


@bp.get("/teachers/<int:teacher_id>/submissions")
def teacher_submissions(teacher_id):
    teacher = catalog.get_teacher(teacher_id, school_id=current_user.school_id)
    q = EvidenceSubmission.query.filter_by(teacher_id=teacher.id)
    status = (request.args.get("status") or "").upper()
    if status in SubmissionStatus.ALL:
        q = q.filter_by(status=status)
    q = q.order_by(EvidenceSubmission.created_at.desc(), EvidenceSubmission.id.desc())
    return jsonify(paginate(q))


@bp.get("/kpis/<int:kpi_id>/evidence")
def list_kpi_evidence(kpi_id):
    kpi = catalog.get_kpi(kpi_id)
    if not catalog.is_kpi_visible(kpi, kpi.job_type_id, current_user.school_id):
        raise DataUnavailable(f"KPI {kpi_id} not found", kpi_id=kpi_id)
    return jsonify([
        {"id": e.id, "name": e.name, "is_official": e.is_official}
        for e in catalog.visible_evidence(kpi.id, current_user.school_id)
    ])


@bp.post("/kpis/<int:kpi_id>/evidence")
def create_kpi_evidence(kpi_id):
    form = SchoolEvidenceForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid evidence item", "fields": form.errors}), 400
    ev = add_school_evidence(current_user.school_id, kpi_id, form.name.data.strip())
    return jsonify({"id": ev.id, "name": ev.name, "kpi_id": ev.kpi_id, "is_official": ev.is_official}), 201


@bp.put("/kpis/<int:kpi_id>/evidence/<int:evidence_id>")
def update_kpi_evidence(kpi_id, evidence_id):
    form = SchoolEvidenceForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid evidence item", "fields": form.errors}), 400
    ev = rename_school_evidence(current_user.school_id, kpi_id, evidence_id, form.name.data.strip())
    return jsonify({"id": ev.id, "name": ev.name, "kpi_id": ev.kpi_id, "is_official": ev.is_official})


@bp.delete("/kpis/<int:kpi_id>/evidence/<int:evidence_id>")
def delete_kpi_evidence(kpi_id, evidence_id):
    delete_school_evidence(current_user.school_id, kpi_id, evidence_id)
    return "", 204
