"""
Flask Application Factory
"""

from flask import Flask, jsonify
from config import config
from extensions import db, migrate, jwt, bcrypt, cors, limiter
import os

from complaintdesk.errors import register_error_handlers, register_jwt_callbacks


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    }, supports_credentials=True)
    limiter.init_app(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)
    register_jwt_callbacks()

    # Create database tables
    with app.app_context():
        from complaintdesk import models  # noqa: F401
        db.create_all()

    return app


def register_blueprints(app):
    """Register Flask blueprints"""
    from complaintdesk.api.auth import auth_bp
    from complaintdesk.api.complaints import complaints_bp
    from complaintdesk.api.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(complaints_bp, url_prefix='/api/complaints')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({'status': 'healthy', 'message': 'API is running'}), 200

    @app.route('/')
    def index():
        return jsonify({
            'message': 'Complaint Management System API is running',
            'version': '1.0.0',
            'endpoints': {
                'auth': '/api/auth',
                'complaints': '/api/complaints',
                'admin': '/api/admin'
            }
        }), 200
