from flask import current_app, jsonify, request
from sqlalchemy.exc import IntegrityError
from . import bp
from .forms import EvidenceItemForm, JobTypeForm, KpiForm, UserForm
from ...extensions import db
from ...models.evidence import EvidenceItem
from ...models.job_type import JobType
from ...models.kpi import KPI
from ...models.school import School
from ...models.submission import EvidenceSubmission
from ...models.user import User, Role
from ...services import catalog
from ...services.weights import to_decimal, validate_weights
from ...utils.decorators import admin_required
from ...utils.json_body import json_bool
from ...utils.pagination import paginate


@bp.before_request
@admin_required
def _guard():
    return None


def _kpi_dict(k):
    return {
        "id": k.id,
        "job_type_id": k.job_type_id,
        "name": k.name,
        "weight": float(k.weight),
        "min_accepted_evidence": k.min_accepted_evidence,
        "is_official": k.is_official,
        "school_id": k.school_id,
        "active": k.active,
    }


def _form_error(form, what):
    return jsonify({"error": f"invalid {what}", "fields": form.errors}), 400


# ---- job types ----

@bp.get("/job-types")
def list_job_types():
    out = []
    for jt in JobType.query.order_by(JobType.name).all():
        official = [k for k in jt.kpis if k.is_official and k.school_id is None and k.active]
        v = validate_weights(official, jt.id, jt.name)
        out.append({"id": jt.id, "name": jt.name, "active": jt.active,
                    "kpi_count": len(official), "total_weight": v.total_weight, "is_valid": v.is_valid})
    return jsonify(out)


@bp.post("/job-types")
def create_job_type():
    form = JobTypeForm()
    if not form.validate_on_submit():
        return _form_error(form, "job type")
    jt = JobType(name=form.name.data.strip())
    db.session.add(jt)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "job type name already exists"}), 409
    return jsonify({"id": jt.id, "name": jt.name, "active": jt.active}), 201


@bp.put("/job-types/<int:job_type_id>")
def update_job_type(job_type_id):
    jt = catalog.get_job_type(job_type_id)
    body = request.get_json(silent=True) or {}
    if body.get("name"):
        jt.name = str(body["name"]).strip()
    active = json_bool(body, "active")
    if active is not None:
        jt.active = active
    db.session.commit()
    return jsonify({"id": jt.id, "name": jt.name, "active": jt.active})


@bp.delete("/job-types/<int:job_type_id>")
def delete_job_type(job_type_id):
    jt = catalog.get_job_type(job_type_id)
    if User.query.filter_by(job_type_id=jt.id).count():
        return jsonify({"error": "job type is assigned to users"}), 409
    if jt.kpis:
        return jsonify({"error": "job type still has KPIs"}), 409
    db.session.delete(jt)
    db.session.commit()
    return "", 204


# ---- KPIs ----

@bp.get("/job-types/<int:job_type_id>/kpis")
def list_kpis(job_type_id):
    catalog.get_job_type(job_type_id)
    rows = (KPI.query.filter_by(job_type_id=job_type_id, is_official=True, school_id=None)
            .order_by(KPI.name, KPI.id).all())
    v = validate_weights([k for k in rows if k.active], job_type_id)
    return jsonify({"kpis": [_kpi_dict(k) for k in rows], "total_weight": v.total_weight, "is_valid": v.is_valid})


@bp.post("/job-types/<int:job_type_id>/kpis")
def create_kpi(job_type_id):
    catalog.get_job_type(job_type_id)
    form = KpiForm()
    if not form.validate_on_submit():
        return _form_error(form, "KPI")
    kpi = KPI(
        job_type_id=job_type_id,
        name=form.name.data.strip(),
        weight=to_decimal(form.weight.data),
        min_accepted_evidence=form.min_accepted_evidence.data,
        is_official=True,
    )
    db.session.add(kpi)
    db.session.commit()
    current_app.logger.info('official KPI %s created for job type %s', kpi.id, job_type_id)
    return jsonify(_kpi_dict(kpi)), 201


@bp.put("/kpis/<int:kpi_id>")
def update_kpi(kpi_id):
    kpi = catalog.get_kpi(kpi_id)
    form = KpiForm()
    if not form.validate_on_submit():
        return _form_error(form, "KPI")
    kpi.name = form.name.data.strip()
    kpi.weight = to_decimal(form.weight.data)
    kpi.min_accepted_evidence = form.min_accepted_evidence.data
    active = json_bool(request.get_json(silent=True) or {}, "active")
    if active is not None:
        kpi.active = active
    db.session.commit()
    return jsonify(_kpi_dict(kpi))


@bp.delete("/kpis/<int:kpi_id>")
def delete_kpi(kpi_id):
    kpi = catalog.get_kpi(kpi_id)
    if EvidenceSubmission.query.filter_by(kpi_id=kpi.id).count():
        # keep history: submissions point at it
        kpi.active = False
        db.session.commit()
        return jsonify(_kpi_dict(kpi))
    db.session.delete(kpi)
    db.session.commit()
    return "", 204


# ---- evidence items ----

@bp.get("/kpis/<int:kpi_id>/evidence")
def list_evidence(kpi_id):
    catalog.get_kpi(kpi_id)
    rows = EvidenceItem.query.filter_by(kpi_id=kpi_id, is_official=True).order_by(EvidenceItem.name).all()
    return jsonify([{"id": e.id, "name": e.name} for e in rows])


@bp.post("/kpis/<int:kpi_id>/evidence")
def create_evidence(kpi_id):
    catalog.get_kpi(kpi_id)
    form = EvidenceItemForm()
    if not form.validate_on_submit():
        return _form_error(form, "evidence item")
    e = EvidenceItem(kpi_id=kpi_id, name=form.name.data.strip(), is_official=True)
    db.session.add(e)
    db.session.commit()
    return jsonify({"id": e.id, "name": e.name, "kpi_id": e.kpi_id}), 201


@bp.put("/evidence/<int:evidence_id>")
def update_evidence(evidence_id):
    e = db.get_or_404(EvidenceItem, evidence_id)
    form = EvidenceItemForm()
    if not form.validate_on_submit():
        return _form_error(form, "evidence item")
    e.name = form.name.data.strip()
    db.session.commit()
    return jsonify({"id": e.id, "name": e.name, "kpi_id": e.kpi_id})


@bp.delete("/evidence/<int:evidence_id>")
def delete_evidence(evidence_id):
    e = db.get_or_404(EvidenceItem, evidence_id)
    if EvidenceSubmission.query.filter_by(evidence_id=e.id).count():
        return jsonify({"error": "evidence item has submissions"}), 409
    db.session.delete(e)
    db.session.commit()
    return "", 204


# ---- schools & users ----

@bp.get("/schools")
def list_schools():
    rows = School.query.order_by(School.name).all()
    return jsonify([{"id": s.id, "name": s.name, "active": s.active} for s in rows])


@bp.post("/schools")
def create_school():
    body = request.get_json(silent=True) or {}
    name = str(body.get("name") or "").strip()
    if not name:
        return jsonify({"error": "name is required"}), 400
    s = School(name=name)
    db.session.add(s)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "school name already exists"}), 409
    return jsonify({"id": s.id, "name": s.name, "active": s.active}), 201


@bp.get("/users")
def list_users():
    q = User.query
    role = request.args.get("role")
    if role:
        q = q.filter_by(role=role)
    return jsonify(paginate(q.order_by(User.name, User.id)))


@bp.post("/users")
def create_user():
    form = UserForm()
    if not form.validate_on_submit():
        return _form_error(form, "user")
    if form.role.data != Role.ADMIN and not form.school_id.data:
        return jsonify({"error": "school_id is required for managers and teachers"}), 400
    if form.role.data == Role.TEACHER and not form.job_type_id.data:
        return jsonify({"error": "job_type_id is required for teachers"}), 400
    u = User(
        name=form.name.data.strip(),
        email=form.email.data.strip().lower(),
        role=form.role.data,
        school_id=form.school_id.data,
        job_type_id=form.job_type_id.data,
    )
    u.set_password(form.password.data)
    db.session.add(u)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "email already in use"}), 409
    return jsonify(u.to_dict()), 201


@bp.put("/users/<int:user_id>/status")
def set_user_status(user_id):
    u = db.get_or_404(User, user_id)
    active = json_bool(request.get_json(silent=True) or {}, "status")
    if active is None:
        return jsonify({"error": "status must be true or false"}), 400
    u.status = active
    db.session.commit()
    return jsonify(u.to_dict())
