import os
import importlib
import pkgutil

from flask import Blueprint, Flask

from config import settings
from utils.program_log import configure_program_logging


def create_app() -> Flask:
    """Flask application factory."""
    app = Flask(__name__)
    app.secret_key = settings.SECRET_KEY

    """Registration of error handlers."""
    from middleware.handlers import register_error_handlers
    register_error_handlers(app)

    app.config["PROGRAM_LOG_DIR"] = settings.PROGRAM_LOG_DIR
    configure_program_logging(app.config["PROGRAM_LOG_DIR"])

    # Auto-register all blueprints defined in routes/*.py
    from routes import __path__ as routes_path

    for _, module_name, _ in pkgutil.iter_modules(routes_path):
        module = importlib.import_module(f"routes.{module_name}")
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if isinstance(obj, Blueprint):
                app.register_blueprint(obj)

    if os.getenv("DB_BOOTSTRAP_INDEXES", "0") == "1":
        from config.database import bootstrap_indexes
        bootstrap_indexes()
    return app


if __name__ == "__main__":
    from os import getenv

    app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(getenv("PORT", 5000)),
        debug=getenv("FLASK_DEBUG", "0") == "1",
        use_reloader=False,
    )
