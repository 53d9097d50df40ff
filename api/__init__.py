import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models.db_storage import DBStorage
from services.identity import IdentityService
from services.inventory import SweetService
from services.orders import OrderService
from utils.security import TokenSigner

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Sweet Shop API",
        "version": "1.0.0",
        "description": "REST API for browsing and purchasing sweets, managing inventory and viewing sales.",
    },
    "basePath": "/",
    "schemes": ["http"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _cors_origins(raw: str):
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins


def create_app(config=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    ``config`` is a config name ("dev", "prod", "test") or a config class.
    The storage handle, token signer and services are built here once and
    kept in ``app.extensions``.
    """
    app = Flask(__name__)

    config_obj = config if isinstance(config, type) else get_config(config)
    app.config.from_object(config_obj)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"), format=LOG_FORMAT)
    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))

    origins = _cors_origins(app.config.get("CORS_ORIGINS", "*"))
    CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=origins != "*")

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    register_error_handlers(app)

    # Persistence + token signing, wired once per process
    storage = DBStorage(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))
    storage.reload()
    signer = TokenSigner.from_config(app.config)
    orders = OrderService(storage)

    app.extensions["storage"] = storage
    app.extensions["token_signer"] = signer
    app.extensions["identity_service"] = IdentityService(storage=storage, signer=signer)
    app.extensions["order_service"] = orders
    app.extensions["sweet_service"] = SweetService(storage, orders)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .sweets import bp as sweets_bp
    from .orders import bp as orders_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(sweets_bp, url_prefix="/api/sweets")
    app.register_blueprint(orders_bp, url_prefix="/api/orders")

    from . import cli
    cli.init_app(app)

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "success": True,
            "message": "Welcome to Sweet Shop API",
            "data": {"docs": "/apidocs/", "health": "/health"},
        }, 200

    logging.getLogger(__name__).info("app created env=%s", app.config.get("APP_ENV"))
    return app
