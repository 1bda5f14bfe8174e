from flask import Flask, request
from flask_cors import CORS

from .config import RelayConfig, load_config


def create_app(config: RelayConfig = None, controller=None):
    """
    Creates, configures, and returns the Flask application.
    This is the application factory.

    Args:
        config: Settings to use, read from the environment when omitted
        controller: Prebuilt SubmissionController, mainly for tests
    """
    if config is None:
        config = load_config()

    app = Flask(__name__)
    app.config["RELAY"] = config
    CORS(app, origins=list(config.cors_origins))

    # Imports are placed here to avoid circular dependencies.
    from .controllers.submission_controller import SubmissionController
    if controller is None:
        controller = SubmissionController(config)
    app.extensions["brief_relay"] = controller

    @app.before_request
    def enforce_rate_limit():
        # CORS preflights are answered by flask-cors and are not counted
        if request.method == "OPTIONS":
            return None
        return controller.enforce_rate_limit(request.remote_addr)

    from .routes import register_blueprints
    register_blueprints(app)

    return app
