from __future__ import annotations

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS
from flask_mail import Mail

from jobgenie.approvals.notifications import Branding, FlaskMailSender, NotificationDispatcher
from jobgenie.approvals.workflow import ApprovalWorkflow
from jobgenie.config import get_config
from jobgenie.db import init_db
from jobgenie.middlewares.error_handler import init_error_handlers
from jobgenie.middlewares.logging import init_request_logging
from jobgenie.middlewares.rate_limit import init_rate_limiting
from jobgenie.middlewares.request_id import init_request_id
from jobgenie.middlewares.security_headers import init_security_headers
from jobgenie.routes.core import core_bp
from jobgenie.routes.mis import mis_bp
from jobgenie.routes.profile import candidate_bp, employer_bp
from jobgenie.utils.logging import setup_logging


def create_app() -> Flask:
    load_dotenv()

    cfg = get_config()
    setup_logging(cfg.LOG_LEVEL)

    app = Flask(__name__)
    app.config["CFG"] = cfg
    app.config.update(cfg.mail_settings())

    CORS(
        app,
        origins=cfg.CORS_ORIGINS,
        supports_credentials=cfg.CORS_ALLOW_CREDENTIALS,
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        methods=["GET", "POST", "PUT", "OPTIONS"],
        max_age=3600,
    )

    init_request_id(app)
    init_security_headers(app)
    init_rate_limiting(app)
    init_request_logging(app)
    init_error_handlers(app)

    session_factory = init_db(app)

    mail = Mail(app)
    dispatcher = NotificationDispatcher(
        session_factory,
        FlaskMailSender(app, mail),
        branding=Branding(brand_name=cfg.BRAND_NAME, site_url=cfg.SITE_URL),
        max_workers=cfg.NOTIFY_MAX_WORKERS,
    )
    app.extensions["notifications"] = dispatcher
    app.extensions["approvals"] = ApprovalWorkflow(session_factory, dispatcher)

    app.register_blueprint(core_bp)
    app.register_blueprint(mis_bp, url_prefix="/api/mis")
    app.register_blueprint(candidate_bp, url_prefix="/api/candidate/profile")
    app.register_blueprint(employer_bp, url_prefix="/api/employer/company")

    return app
