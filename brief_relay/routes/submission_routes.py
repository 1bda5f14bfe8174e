from flask import Blueprint, current_app, request

submission_bp = Blueprint("submission", __name__, url_prefix="/api")


@submission_bp.route("/submit", methods=["POST"])
def handle_submission():
    """Route: Delegate to controller"""
    controller = current_app.extensions["brief_relay"]
    return controller.handle_submission(request)
