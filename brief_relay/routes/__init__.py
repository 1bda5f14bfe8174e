def register_blueprints(app):
    """Register all route blueprints with the Flask app"""
    from .submission_routes import submission_bp

    app.register_blueprint(submission_bp)
