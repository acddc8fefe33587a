from flask import current_app, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
from . import bp
from ...extensions import db
from .forms import LoginForm
from ...models.user import User
from ...models.notification import Notification
from ...utils.pagination import paginate


@bp.get("/csrf")
def csrf_token():
    return jsonify({"csrf_token": generate_csrf()})


@bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"error": "invalid login form", "fields": form.errors}), 400
    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if not user or not user.check_password(form.password.data):
        current_app.logger.info('failed login for %s', form.email.data)
        return jsonify({"error": "invalid credentials"}), 401
    if not login_user(user):
        return jsonify({"error": "account disabled"}), 403
    return jsonify(user.to_dict())


@bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@bp.get("/me")
@login_required
def me():
    return jsonify(current_user.to_dict())


@bp.get("/notifications")
@login_required
def notifications():
    q = Notification.query.filter_by(user_id=current_user.id).order_by(Notification.created_at.desc(), Notification.id.desc())
    out = paginate(q)
    out["unread"] = Notification.query.filter_by(user_id=current_user.id, is_read=False).count()
    return jsonify(out)


@bp.post("/notifications/<int:notification_id>/read")
@login_required
def mark_notification_read(notification_id):
    n = Notification.query.filter_by(id=notification_id, user_id=current_user.id).first_or_404()
    n.is_read = True
    db.session.commit()
    return jsonify(n.to_dict())


@bp.put("/notifications/read-all")
@login_required
def mark_all_notifications_read():
    updated = (
        Notification.query
        .filter_by(user_id=current_user.id, is_read=False)
        .update({"is_read": True}, synchronize_session=False)
    )
    db.session.commit()
    return jsonify({"updated": updated})
