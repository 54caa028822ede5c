import os
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from src.infrastructure.config import settings
from src.infrastructure.database import get_database, init_app as init_db
from src.infrastructure.identity import login_manager
from src.services.registry import EXTENSION_KEY, QuizServices, build_mongo_services
from qh_utils.logger_utils import configure_logging, logger

# Import Blueprints
from src.api.routes_quiz import quiz_bp
from src.api.routes_listing import listing_bp
from src.api.routes_attempts import attempts_bp


def create_app(services: Optional[QuizServices] = None):
    """
    Application factory for Flask.

    :param services: Prebuilt services (e.g. over in-memory repositories in
                     tests). When omitted they are built over MongoDB.
    """
    app = Flask(__name__)
    configure_logging(settings.LOG_LEVEL)

    # --- Core Configuration ---
    app.config.from_object(settings)
    app.config['JSON_AS_ASCII'] = False
    app.json.sort_keys = False
    CORS(app, resources={r"/api/*": {"origins": "*"}}, supports_credentials=True)

    # --- Initialize Extensions ---
    login_manager.init_app(app)
    if services is None:
        init_db(app)
        services = build_mongo_services(get_database(app), record_attempts=settings.RECORD_ATTEMPTS)
    app.extensions[EXTENSION_KEY] = services

    # --- Blueprints Registration ---
    # Static listing paths win over the /<quiz_id> rules sharing this prefix.
    app.register_blueprint(listing_bp, url_prefix='/api/quiz')
    app.register_blueprint(quiz_bp, url_prefix='/api/quiz')
    app.register_blueprint(attempts_bp, url_prefix='/api/attempts')

    # --- Request Hooks ---
    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'SAMEORIGIN'
        response.headers['Cache-Control'] = 'no-store'
        return response

    # --- Health Checks ---
    @app.route('/health')
    def health_check():
        return jsonify({"status": "healthy"}), 200

    @app.route('/health/detailed')
    def detailed_health_check():
        health_status = {"status": "healthy", "components": {}}
        if 'mongo_client' not in app.extensions:
            health_status["components"]["storage"] = {"status": "healthy", "backend": "injected"}
            return jsonify(health_status), 200
        try:
            get_database(app).command('ping')
            health_status["components"]["mongodb"] = {"status": "healthy"}
        except Exception as e:
            health_status["components"]["mongodb"] = {"status": "unhealthy", "error": str(e)}
            health_status["status"] = "unhealthy"
        return jsonify(health_status), 503 if health_status["status"] == "unhealthy" else 200

    # --- Error Handling ---
    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        if error.code == 404:
            logger.warning(f"Not Found error for path: {request.path}")
        return jsonify({"error": error.name}), error.code

    @app.errorhandler(Exception)
    def handle_exception(error):
        logger.error(f"Unhandled exception for path {request.path}: {error}", exc_info=True)
        return jsonify({"error": "Internal Server Error"}), 500

    logger.info(f"Flask App created successfully in {settings.FLASK_ENV} mode.")
    return app

if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get("PORT", 5000)))
