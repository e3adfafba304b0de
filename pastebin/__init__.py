from __future__ import annotations

import atexit
import os

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from .api.pages import pages_bp
from .api.pastes import api_bp
from .config import get_config
from .observability import init_observability
from .store import init_store
from .worker.expiry_worker import start_expiry_worker, stop_expiry_worker


def create_app(env_name: str | None = None) -> Flask:
    """
    Application factory for the pastebin service.

    The configuration is selected based on the provided ``env_name`` or,
    if not given, the ``APP_ENV`` environment variable (falling back to
    ``development``).
    """
    if env_name is None:
        env_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    app_config = get_config(env_name)
    app.config.from_object(app_config)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # type: ignore[method-assign]

    CORS(app)

    # Initialize infrastructure layers
    init_observability(app)
    store = init_store(app)

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(pages_bp)

    # Redis expires keys natively; the SQL store needs a sweeper.
    if store.needs_sweeping and app.config.get("EXPIRY_WORKER_ENABLED", True):
        if start_expiry_worker(store, app.config["EXPIRY_WORKER_INTERVAL_SECONDS"]):
            atexit.register(stop_expiry_worker)

    return app
