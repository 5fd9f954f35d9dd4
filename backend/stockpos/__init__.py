# backend/stockpos/__init__.py
from flask import Flask

from .config import Config
from .extensions import db, migrate


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # SQLite: read-then-write paths need the write lock from their first read
    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            from .store import use_immediate_transactions
            use_immediate_transactions(db.engine)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # One generator per process keeps order numbers strictly increasing
    from .services.order_service import OrderNumberGenerator
    from .services.pos_service import ORDER_NUMBERS_EXTENSION
    app.extensions[ORDER_NUMBERS_EXTENSION] = OrderNumberGenerator(app.config["ORDER_NUMBER_PREFIX"])

    # Register blueprints
    from .routes.errors import errors_bp
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.items import items_bp
    from .routes.stock import stock_bp
    from .routes.orders import orders_bp
    from .routes.settings import settings_bp
    from .routes.reports import reports_bp

    app.register_blueprint(errors_bp)
    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(reports_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
