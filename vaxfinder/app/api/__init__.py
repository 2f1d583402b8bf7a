"""API blueprint registration."""
from flask import Blueprint

api_bp = Blueprint("api", __name__)

# Import endpoints to ensure they are registered with the blueprint.
from .locations import locations_bp  # noqa: E402,F401

api_bp.register_blueprint(locations_bp, url_prefix="/healthpoint")
