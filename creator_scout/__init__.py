"""
Flask application factory.

Creates and configures the JSON API, registers all blueprints.
"""
from flask import Flask, jsonify


def create_app():
    """Create and configure the Flask application."""
    from creator_scout.config import SECRET_KEY
    from creator_scout.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    app.secret_key = SECRET_KEY
    app.json.sort_keys = False

    from creator_scout.routes.dashboard import bp as dashboard_bp
    from creator_scout.routes.creators import bp as creators_bp
    from creator_scout.routes.imports import bp as imports_bp
    from creator_scout.routes.duplicates import bp as duplicates_bp
    from creator_scout.routes.scrape import bp as scrape_bp
    from creator_scout.routes.export import bp as export_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(creators_bp)
    app.register_blueprint(imports_bp)
    app.register_blueprint(duplicates_bp)
    app.register_blueprint(scrape_bp)
    app.register_blueprint(export_bp)

    @app.errorhandler(404)
    def not_found(_error):
        return jsonify({'success': False, 'error': 'Not found'}), 404

    # Circuit breakers for outbound services
    from creator_scout.extensions import redis_client
    from creator_scout.services.circuit_breaker import init_breakers
    init_breakers(redis_client)

    # Import models so Base.metadata knows about them.
    # Schema is managed by Alembic — no create_all() here.
    import importlib
    importlib.import_module('creator_scout.models.creator')
    importlib.import_module('creator_scout.models.scraping_job')

    return app
