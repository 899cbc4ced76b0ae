import atexit
import logging
import traceback
from datetime import timedelta

from flask import Flask, request
from flask_pymongo import PyMongo
from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from pymongo import monitoring
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config, DEFAULT_SECRET_KEY
from core.errors import ServiceError
from core.logging import setup_logging
from core.response import json_error, json_success
from core.security import PasswordHasher, TokenManager
from repositories.sweet_repo import SweetRepository
from repositories.user_repo import UserRepository
from services.auth_service import AuthService
from services.sweet_service import SweetService
from utils.db_monitor import FlaskMongoCommandLogger
from utils.request_metrics import start_request, finish_request
from utils.startup import close_client, run_local_startup
from utils.timezone_utils import now_utc

# pymongo listeners are process-wide; register once even if create_app runs repeatedly
_mongo_listener_registered = False

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
}

HTTP_ERROR_CODES = {
    404: 'NOT_FOUND',
    405: 'METHOD_NOT_ALLOWED',
    413: 'PAYLOAD_TOO_LARGE',
    429: 'RATE_LIMITED',
}


def _check_production_secrets(app: Flask) -> None:
    if app.config.get('APP_ENV') != 'production':
        return
    for key in ('SECRET_KEY', 'JWT_SECRET'):
        if app.config.get(key) in (None, '', DEFAULT_SECRET_KEY):
            raise RuntimeError(f'{key} must be set to a secure value in production')


def create_app(config_object=Config, *, sweet_repo=None, user_repo=None):
    """Application factory.

    Repositories may be injected (tests pass in-memory ones); otherwise they
    are built on the shared PyMongo handle, which is closed at interpreter exit.
    """
    global _mongo_listener_registered

    app = Flask(__name__)
    app.config.from_object(config_object)
    setup_logging(level=app.config.get('LOG_LEVEL', 'INFO'), json_format=app.config.get('LOG_JSON', False))
    _check_production_secrets(app)

    # Proxy fix to get real client IP (rate limiting) when behind a proxy
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    # Register pymongo command listener before client creation
    if not _mongo_listener_registered:
        monitoring.register(FlaskMongoCommandLogger())
        _mongo_listener_registered = True

    # Extensions
    mongo = None
    if sweet_repo is None or user_repo is None:
        mongo = PyMongo(app)
        if mongo.db is None:
            raise RuntimeError('MONGO_URI must include a database name, e.g. mongodb://host:27017/sweet_shop')
        atexit.register(close_client, mongo.cx)
    bcrypt = Bcrypt(app)
    limiter = Limiter(key_func=get_remote_address, app=app)

    # Services
    hasher = PasswordHasher(bcrypt)
    tokens = TokenManager(
        app.config['JWT_SECRET'],
        algorithm=app.config.get('JWT_ALGORITHM', 'HS256'),
        expires_in=timedelta(days=app.config.get('JWT_EXPIRES_DAYS', 7)),
    )
    auth_service = AuthService(user_repo or UserRepository(mongo.db), hasher, tokens)
    sweet_service = SweetService(sweet_repo or SweetRepository(mongo.db))

    # Attach helpful objects to the app for other modules to access without re-creating
    app.mongo = mongo
    app.bcrypt = bcrypt
    app.limiter = limiter
    app.auth_service = auth_service
    app.sweet_service = sweet_service

    # Request lifecycle hooks
    @app.before_request
    def _before_request_metrics():
        start_request()

    @app.after_request
    def _after_request(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        data = finish_request(status_code=response.status_code)
        if data:
            response.headers['X-Request-Time-ms'] = str(round(data.get('total_ms') or 0, 2))
            if app.config.get('LOG_PERF_DETAILS'):
                app.logger.info(
                    f"{request.method} {request.path} -> {response.status_code} | total={data['total_ms']:.1f}ms "
                    f"db={data['db_count']}/{data['db_ms']:.1f}ms {data['collections']}"
                )
        return response

    # Error handlers: every failure leaves as {success: false, message, code}
    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        level = logging.ERROR if err.status_code >= 500 else logging.INFO
        app.logger.log(level, f"{request.method} {request.path} failed: {err.code} {err.message}")
        return json_error(err.message, code=err.code, status=err.status_code)

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate_key(err: DuplicateKeyError):
        app.logger.info(f"Duplicate key on {request.path}: {err}")
        return json_error("Duplicate entry", code='DUPLICATE_ENTRY', status=409)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status_code = err.code or 500
        if status_code == 404:
            message = f"Route not found: {request.method} {request.path}"
        else:
            message = err.description or err.name
        code = HTTP_ERROR_CODES.get(status_code) or err.name.upper().replace(' ', '_')
        return json_error(message, code=code, status=status_code)

    @app.errorhandler(Exception)
    def handle_any_exception(err):
        show_details = app.debug or app.config.get('SHOW_DETAILED_ERRORS')
        tb_str = ''.join(traceback.format_exception(type(err), err, err.__traceback__))
        app.logger.error(f"Unhandled exception: {tb_str}")
        if show_details:
            return json_error(str(err) or type(err).__name__, code='INTERNAL_ERROR', status=500, details=tb_str)
        return json_error("Internal server error", code='INTERNAL_ERROR', status=500)

    @app.route('/health')
    def health():
        return {'success': True, 'status': 'ok', 'timestamp': now_utc().isoformat()}, 200

    @app.route('/api')
    def api_index():
        return json_success("Sweet Shop API", {'auth': '/api/auth', 'sweets': '/api/sweets'})

    # Blueprint registration helper
    def register_blueprints():
        from routes.auth import init_auth_blueprint
        from routes.sweets import init_sweets_blueprint

        if 'auth_bp' not in app.blueprints:
            app.register_blueprint(init_auth_blueprint(auth_service, limiter))
        if 'sweets_bp' not in app.blueprints:
            app.register_blueprint(init_sweets_blueprint(sweet_service, auth_service))

    register_blueprints()
    # Health probes should never be throttled
    limiter.exempt(health)

    return app


if __name__ == '__main__':
    app = create_app()
    run_local_startup(app.mongo.db, create_indexes=bool(app.config.get('ENSURE_INDEXES')))
    app.run(debug=True, host='0.0.0.0', port=5000)
