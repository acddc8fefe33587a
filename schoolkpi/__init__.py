import logging

from flask import Flask, jsonify
from flask_migrate import Migrate
from werkzeug.exceptions import HTTPException

from .extensions import db, login_manager, rq
from .errors import SchoolKpiError

migrate = Migrate()


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger('schoolkpi').setLevel(level)


def _register_error_handlers(app):
    @app.errorhandler(SchoolKpiError)
    def handle_domain_error(e):
        if e.status_code >= 500:
            app.logger.error('request failed: %s', e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description or e.name}), e.code


def create_app(config_object='config.Config'):
    """App factory. ``config_object`` is an import path or a config class."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    rq.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from .models.user import User
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "authentication required"}), 401

    _register_error_handlers(app)

    from .blueprints.auth import bp as auth_bp
    from .blueprints.teacher import bp as teacher_bp
    from .blueprints.school import bp as school_bp
    from .blueprints.admin import bp as admin_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(teacher_bp, url_prefix="/teacher")
    app.register_blueprint(school_bp, url_prefix="/school")
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.get('/')
    def index():
        from flask_login import current_user
        from flask import redirect, url_for
        from .models.user import Role
        if not current_user.is_authenticated:
            return jsonify({"error": "authentication required", "login": url_for('auth.login')}), 401
        target = {
            Role.ADMIN: 'admin.list_job_types',
            Role.SCHOOL_MANAGER: 'school.teacher_scores',
            Role.TEACHER: 'teacher.dashboard',
        }.get(current_user.role)
        if not target:
            return jsonify({"error": "unknown role"}), 403
        return redirect(url_for(target))

    return app
