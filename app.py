from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy import event
from datetime import datetime
import os
import logging

from models import db
from utils.caching import cache_manager
from utils.email_service import mail, email_service
from utils.error_handling import register_error_handlers
from utils.permissions import login_manager, enforce_route_roles
from utils.bulk_upload_service import BulkUploadService
from utils.upload_history_service import UploadHistoryService
from utils.user_service import UserService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ['true', 'on', '1']


def enable_sqlite_savepoints(engine):
    """Let SQLAlchemy emit BEGIN itself so pysqlite honours SAVEPOINT"""

    @event.listens_for(engine, 'connect')
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def do_begin(conn):
        conn.exec_driver_sql('BEGIN')


def load_config(app):
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    app.config['JWT_SECRET_KEY'] = os.environ.get('JWT_SECRET_KEY')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('SQLALCHEMY_DATABASE_URI') or os.environ.get('DATABASE_URL', 'sqlite:///idea_factory.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Token and session lifetimes (hours)
    app.config['JWT_EXPIRY_HOURS'] = int(os.environ.get('JWT_EXPIRY_HOURS', 24))
    app.config['ADMIN_SESSION_HOURS'] = int(os.environ.get('ADMIN_SESSION_HOURS', 24))
    app.config['VERIFICATION_TOKEN_HOURS'] = int(os.environ.get('VERIFICATION_TOKEN_HOURS', 24))
    app.config['RESET_TOKEN_HOURS'] = int(os.environ.get('RESET_TOKEN_HOURS', 1))

    app.config['MAIL_SERVER'] = os.environ.get('MAIL_SERVER')
    app.config['MAIL_PORT'] = int(os.environ.get('MAIL_PORT', 587))
    app.config['MAIL_USE_TLS'] = _env_flag('MAIL_USE_TLS', 'true')
    app.config['MAIL_USERNAME'] = os.environ.get('MAIL_USERNAME')
    app.config['MAIL_PASSWORD'] = os.environ.get('MAIL_PASSWORD')
    app.config['MAIL_DEFAULT_SENDER'] = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@ideafactory.com')
    app.config['FRONTEND_URL'] = os.environ.get('FRONTEND_URL', 'http://localhost:3000')

    app.config['CORS_ORIGINS'] = [origin.strip() for origin in os.environ.get('CORS_ORIGINS', 'http://localhost:3000').split(',') if origin.strip()]

    # Upload configuration
    app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max file size
    app.config['CATEGORY_CACHE_TTL'] = int(os.environ.get('CATEGORY_CACHE_TTL', 300))

    # Startup seeding
    app.config['SEED_SAMPLE_DATA'] = _env_flag('SEED_SAMPLE_DATA', 'true')
    app.config['DEFAULT_ADMIN_USERNAME'] = os.environ.get('DEFAULT_ADMIN_USERNAME', 'admin')
    app.config['DEFAULT_ADMIN_EMAIL'] = os.environ.get('DEFAULT_ADMIN_EMAIL', 'admin@ideafactory.com')
    app.config['DEFAULT_ADMIN_PASSWORD'] = os.environ.get('DEFAULT_ADMIN_PASSWORD', 'admin123')

    # Bearer tokens only, no cookie sessions to protect
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['JSON_AS_ASCII'] = False


def create_app(config_overrides=None):
    app = Flask(__name__)
    load_config(app)
    if config_overrides:
        app.config.update(config_overrides)

    CORS(app,
         origins=app.config['CORS_ORIGINS'],
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )

    # Initialize extensions
    db.init_app(app)
    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            enable_sqlite_savepoints(db.engine)
    mail.init_app(app)
    login_manager.init_app(app)
    cache_manager.clear()

    # Services wired once per application
    history_service = UploadHistoryService()
    app.extensions['upload_history_service'] = history_service
    app.extensions['bulk_upload_service'] = BulkUploadService(history_service)
    app.extensions['user_service'] = UserService(email_service)

    # Request logging middleware
    @app.before_request
    def log_request_info():
        """Log request information for debugging"""
        logger.info(f"Request: {request.method} {request.path} from {request.remote_addr}")

    app.before_request(enforce_route_roles)

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Remove database session at the end of each request/app context"""
        db.session.remove()

    from routes.ideas import ideas_bp
    from routes.idea_details import idea_details_bp
    from routes.auth import auth_bp, admin_auth_bp
    from routes.admin import admin_bp
    from routes.dashboard import dashboard_bp

    # Register blueprints
    app.register_blueprint(ideas_bp, url_prefix='/api')
    app.register_blueprint(idea_details_bp, url_prefix='/api/idea-details')
    app.register_blueprint(auth_bp, url_prefix='/api/users')
    app.register_blueprint(admin_auth_bp, url_prefix='/api/auth')
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(dashboard_bp, url_prefix='/api/dashboard')

    register_error_handlers(app)

    @app.route('/health')
    def health():
        return jsonify({'status': 'UP', 'timestamp': datetime.utcnow().isoformat()})

    return app


if __name__ == '__main__':
    from utils.data_initializer import initialize_database

    app = create_app()
    with app.app_context():
        initialize_database()
    app.run(debug=True, host='0.0.0.0', port=5000)
