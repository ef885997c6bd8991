import os
import logging
from rich.logging import RichHandler
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from asgiref.wsgi import WsgiToAsgi

from config import UPLOAD_FOLDER, MAX_FILE_SIZE
from feedback.errors import FeedbackError
from routes.student_routes import student_bp
from routes.admin_routes import admin_bp

# Configure rich logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)

logging.root.handlers = [
    RichHandler(rich_tracebacks=True, show_path=True, tracebacks_show_locals=False,
                log_time_format="[%b %d, %Y, %I:%M:%S %p]",
                )
]
logger = logging.getLogger("feedback_system")


def handle_feedback_error(error):
    if error.status_code >= 500:
        logger.error(f"{type(error).__name__}: {error.message}")
    else:
        logger.info(f"{type(error).__name__}: {error.message}")
    return jsonify(error.to_dict()), error.status_code


def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return error
    logger.exception("Unhandled error while serving request")
    return jsonify({
        'error': 'Internal server error',
        'details': str(error),
    }), 500


def create_app(store=None):
    """
    Build the Flask app.

    `store` replaces the configured backend for every route, which is how
    tests run the API against a MemoryStore.
    """
    app = Flask(__name__)
    app.secret_key = os.environ.get('SECRET_KEY', 'your_secret_key_change_in_production')
    app.config['MAX_CONTENT_LENGTH'] = MAX_FILE_SIZE
    app.config['FEEDBACK_STORE'] = store

    # Register blueprints
    app.register_blueprint(student_bp)
    app.register_blueprint(admin_bp)

    app.register_error_handler(FeedbackError, handle_feedback_error)
    app.register_error_handler(Exception, handle_unexpected_error)

    @app.route("/")
    def index():
        return {"message": "Feedback API is running", "routes": sorted(
            rule.rule for rule in app.url_map.iter_rules() if rule.rule.startswith('/api/')
        )}

    return app


app = create_app()
asgi_app = WsgiToAsgi(app)


if __name__ == "__main__":
    import uvicorn
    import socket

    os.makedirs(UPLOAD_FOLDER, exist_ok=True)
    host_ip = socket.gethostbyname(socket.gethostname())
    port = int(os.environ.get('PORT', 8000))
    logger.info(f"Starting server on {host_ip}:{port}")
    uvicorn.run(asgi_app, host=host_ip, port=port, log_config=None)
