import os

from dotenv import load_dotenv
from flask import Flask, jsonify, redirect, request, url_for
from flask_wtf.csrf import generate_csrf
from werkzeug.middleware.proxy_fix import ProxyFix

from consignments.cli import register_commands
from consignments.config import config_by_env
from consignments.errors import register_error_handlers
from consignments.extensions import bcrypt, cache, csrf, db, limiter, login_manager, migrate
from consignments.integrations.hubspot import HubSpotClient, HubSpotConfig
from consignments.models import User
from consignments.routes.api import api_bp
from consignments.routes.web.auth import web_auth_bp
from consignments.routes.web.dashboard import web_dashboard_bp
from consignments.routes.web.manager import web_manager_bp


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def handle_unauthorized():
    if request.path.startswith("/api/"):
        return jsonify({"error": "Unauthorized"}), 401
    return redirect(url_for("web_auth.login", next=request.path))


def create_app(env=None):
    load_dotenv()
    env = env or os.getenv("FLASK_ENV", "development")

    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    template_dir = os.path.join(project_root, "templates")
    static_dir = os.path.join(project_root, "static")

    app = Flask(
        __name__,
        instance_relative_config=True,
        template_folder=template_dir,
        static_folder=static_dir,
    )
    app.config.from_object(config_by_env.get(env, config_by_env["development"]))
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if db_uri.startswith("sqlite:///") and not db_uri.startswith("sqlite:////") and db_uri != "sqlite:///:memory:":
        relative_path = db_uri.replace("sqlite:///", "", 1)
        absolute_path = os.path.join(project_root, relative_path)
        os.makedirs(os.path.dirname(absolute_path), exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{absolute_path}"

    upload_dir = app.config["UPLOAD_DIR"]
    if not os.path.isabs(upload_dir):
        upload_dir = os.path.join(project_root, upload_dir)
    app.config["UPLOAD_DIR"] = upload_dir
    os.makedirs(app.config["UPLOAD_DIR"], exist_ok=True)

    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    csrf.init_app(app)
    cache.init_app(app)
    limiter.init_app(app)
    login_manager.init_app(app)
    _init_sentry(app, env)

    hubspot_config = HubSpotConfig.from_app_config(app.config)
    app.extensions["hubspot"] = HubSpotClient(hubspot_config)
    if not hubspot_config.enabled:
        app.logger.info("HUBSPOT_ACCESS_TOKEN not set; CRM sync disabled.")

    register_error_handlers(app)

    app.register_blueprint(web_auth_bp)
    app.register_blueprint(web_manager_bp)
    app.register_blueprint(web_dashboard_bp)
    app.register_blueprint(api_bp, url_prefix="/api")

    register_commands(app)

    if env == "development":
        with app.app_context():
            db.create_all()

    @app.context_processor
    def inject_csrf_token():
        return {"csrf_token": generate_csrf}

    return app


def _init_sentry(app, env):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.05")),
            environment=env,
        )
        app.logger.info("Sentry initialized.")
    except Exception as exc:
        app.logger.warning("Sentry initialization failed: %s", exc)
