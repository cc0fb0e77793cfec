# contract_signature/__init__.py
import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from werkzeug.middleware.proxy_fix import ProxyFix

# initialisation de la base de donnees
db = SQLAlchemy()

logger = logging.getLogger(__name__)


def init_db(app):
    db.init_app(app)
    with app.app_context():
        db.create_all()


def build_service(settings, transport=None, recorder=None, template_source=None, filler=None):
    # construction des collaborateurs; le cycle de vie appartient a l application
    from .email_utils import MemoryMailTransport, SmtpMailTransport
    from .layout import load_layout
    from .notifications import NotificationDispatcher
    from .pdf_utils import build_filler
    from .recorder import SqlSubmissionRecorder
    from .service import SignatureService
    from .template_source import template_source_for

    if transport is None:
        if settings.MAIL_BACKEND == "memory":
            transport = MemoryMailTransport()
        else:
            transport = SmtpMailTransport(
                settings.SMTP_HOST, settings.SMTP_PORT,
                user=settings.SMTP_USER, password=settings.SMTP_PASS, use_tls=settings.SMTP_USE_TLS,
            )
    if recorder is None:
        recorder = SqlSubmissionRecorder(db)
    if template_source is None:
        template_source = template_source_for(settings.CONTRACT_PDF, timeout=settings.TEMPLATE_FETCH_TIMEOUT)
    if filler is None:
        filler = build_filler(load_layout(settings.PDF_LAYOUT))

    dispatcher = NotificationDispatcher(transport, settings.BUSINESS_EMAIL, company_name=settings.COMPANY_NAME)
    return SignatureService(recorder, template_source, filler, dispatcher)


def create_app(settings=None, **collaborators):
    """Fabrique de l application.

    ``collaborators`` permet de remplacer le transport mail, l enregistreur,
    la source du gabarit ou le remplisseur (tests, scripts).
    """
    from config import load_settings
    from . import models  # noqa: F401  (tables connues avant create_all)
    from .logging_config import setup_logging
    from .routes.api import api_bp
    from .routes.sign import sign_bp

    settings = settings or load_settings()
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON, log_folder=settings.LOG_FOLDER)

    app = Flask(__name__)
    if settings.PROXY_FIX_X_FOR:
        # adresse du client reecrite a partir des proxys de confiance seulement
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=settings.PROXY_FIX_X_FOR)
    # chargement de la configuration
    app.config.update(settings.model_dump())
    # base64 gonfle le pdf d environ un tiers
    app.config["MAX_CONTENT_LENGTH"] = settings.MAX_PDF_SIZE_MB * 1024**2 * 4 // 3 + 64 * 1024

    # init db
    init_db(app)
    app.extensions["contract_signature"] = build_service(settings, **collaborators)

    # enregistrement des blueprints
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(sign_bp, url_prefix="/sign")

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"error": "PDF trop volumineux"}), 413

    logger.info(f"Application prete (gabarit {settings.CONTRACT_PDF})")
    return app
