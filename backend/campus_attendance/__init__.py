"""Campus Attendance - Application Factory."""
import logging
import os

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from werkzeug.middleware.proxy_fix import ProxyFix

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Trust forwarded headers from the configured number of proxies only
    hops = app.config.get('PROXY_FIX_X_FOR', 0)
    if hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # Add CLI commands
    register_commands(app)

    # Add health check
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Campus Attendance',
            'version': '1.0.0'
        })

    return app


def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from campus_attendance.api.auth import auth_bp
    from campus_attendance.api.attendance import attendance_bp
    from campus_attendance.api.anti_cheat import anti_cheat_bp
    from campus_attendance.api.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(anti_cheat_bp, url_prefix='/api/anti-cheat')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from werkzeug.exceptions import HTTPException

    from campus_attendance.utils.errors import AttendanceError
    from campus_attendance.utils.helpers import handle_error

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return handle_error(error, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({
            'error': True,
            'message': 'Token has expired',
            'status_code': 401
        }), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Invalid token',
            'status_code': 401
        }), 401

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return jsonify({
            'error': True,
            'message': 'Authorization token required',
            'status_code': 401
        }), 401


def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/app.log')
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.info('Campus Attendance startup')


def setup_database(app: Flask) -> None:
    """Import models so metadata knows every table."""
    with app.app_context():
        from campus_attendance import models  # noqa: F401


def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Seed database with a demo department, course and users."""
        from campus_attendance.services.seed_service import SeedService

        summary = SeedService.seed_all()
        click.echo(
            f"Seeded department {summary['department']} with course {summary['course']}, "
            f"{summary['lecturers']} lecturers and {summary['students']} students."
        )

    @app.cli.command('create-admin')
    @click.option('--email', prompt='Admin email')
    @click.option('--name', prompt='Admin name')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(email, name, password):
        """Create admin user."""
        from sqlalchemy.exc import IntegrityError

        from campus_attendance.models.user import User, UserRole

        admin = User(email=email.lower().strip(), name=name, role=UserRole.ADMIN)
        admin.set_password(password)

        try:
            db.session.add(admin)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise click.ClickException(f'User already exists: {email}')
        click.echo(f'Admin user created: {email}')
