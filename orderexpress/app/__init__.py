from pathlib import Path
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_wtf import CSRFProtect
from .config import Config
from flask_babel import Babel

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
csrf = CSRFProtect()
babel = Babel()

def create_app(config=None):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(config or Config)

    # Configure logging
    import logging
    app.logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter('[%(asctime)s] %(levelname)s in %(module)s: %(message)s')
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)

    # A file-based SQLite URI needs its parent directory to exist before the DB file can be created.
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if db_uri and db_uri.startswith("sqlite:") and "///" in db_uri and ":memory:" not in db_uri:
        parent = Path(db_uri.split("///", 1)[1]).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            app.logger.warning("Could not create SQLite directory %s", parent)

    db.init_app(app)
    migrate.init_app(app, db, directory=str(Path(__file__).resolve().parent.parent / "migrations"))
    login_manager.init_app(app)
    login_manager.login_view = "auth.login"  # type: ignore
    login_manager.login_message_category = "warning"  # type: ignore
    from .models import User

    @login_manager.user_loader
    def load_user(user_id: str):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None
    csrf.init_app(app)

    def get_locale():
        # session override first, then Accept-Language
        from flask import session, request
        languages = app.config.get("LANGUAGES", ("en",))
        if session.get('lang') in languages:
            return session.get('lang')
        return request.accept_languages.best_match(list(languages))

    babel.init_app(app, locale_selector=get_locale)

    @app.after_request
    def set_security_headers(response):
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    # readiness/liveness probe
    @app.route("/health", methods=["GET"])
    def health_check():
        return ("OK", 200)

    from .auth.routes import auth_bp
    from .dashboard.routes import dashboard_bp
    from .businesses.routes import businesses_bp
    from .settings.routes import settings_bp
    from .invitations.routes import invitations_bp
    from .functions.routes import functions_bp
    from .api.v1 import api_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(businesses_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(invitations_bp)
    # JSON endpoints still use session auth
    csrf.exempt(functions_bp)
    app.register_blueprint(functions_bp, url_prefix="/functions")
    csrf.exempt(api_bp)
    app.register_blueprint(api_bp, url_prefix="/api/v1")

    from .cli import invites_cli

    app.cli.add_command(invites_cli)

    return app
