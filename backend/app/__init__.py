"""Flask application factory and initialization."""
import logging

from flask import Flask, jsonify, request
from backend.app.config import Config
from backend.app.extensions import init_extensions
from backend.app import db

logger = logging.getLogger(__name__)


def create_app(config_class=Config, store_factory=None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use
        store_factory: Optional callable returning the DocumentStore used by
            the services. Defaults to the MongoDB-backed store.

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    # Keep response keys in the order the services build them
    app.json.sort_keys = False

    # Initialize Flask extensions
    init_extensions(app, store_factory=store_factory)

    # Ensure lookup indexes on the surveys collection
    if store_factory is None and app.config.get('ENSURE_INDEXES_ON_STARTUP'):
        with app.app_context():
            if not db.ensure_indexes():
                logger.warning('Could not ensure DB indexes at startup')

    # Register health check endpoint
    @app.route('/api/health')
    def health_check():
        """Health check endpoint with database connectivity."""
        response = {
            "status": "ok",
            "service": "locality-survey-api"
        }

        db_health = db.health_check()
        response["database"] = db_health
        if db_health.get("status") != "healthy":
            response["status"] = "degraded"

        return jsonify(response)

    # Register blueprints
    register_blueprints(app)
    register_error_handlers(app)

    @app.after_request
    def after_request(response):
        """Allow configured browser origins to call the API."""
        origin = request.headers.get('Origin')
        allowed = app.config.get('CORS_ALLOWED_ORIGINS') or []
        if origin and ('*' in allowed or origin in allowed):
            response.headers['Access-Control-Allow-Origin'] = origin
            response.headers['Access-Control-Allow-Credentials'] = 'true'
            response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
            response.headers.add('Vary', 'Origin')
        return response

    return app


def register_blueprints(app):
    """Register Flask blueprints with the application.

    Args:
        app: Flask application instance
    """
    # Import API blueprints here to avoid circular imports
    from backend.app.blueprints.api.surveys.routes import surveys_bp
    from backend.app.blueprints.api.localities.routes import localities_bp

    app.register_blueprint(surveys_bp, url_prefix='/api/surveys')
    app.register_blueprint(localities_bp, url_prefix='/api/localities')


def register_error_handlers(app):
    """Return JSON instead of HTML error pages under /api/."""

    @app.errorhandler(404)
    def _404(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "not found", "path": request.path}), 404
        return e

    @app.errorhandler(405)
    def _405(e):
        if request.path.startswith("/api/"):
            return jsonify({"error": "method not allowed", "path": request.path}), 405
        return e

    @app.errorhandler(429)
    def _429(e):
        return jsonify({"success": False, "error": f"rate limit exceeded: {e.description}"}), 429
