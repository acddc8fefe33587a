from flask import Blueprint

bp = Blueprint("school", __name__)

from . import routes  # noqa: E402,F401
