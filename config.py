# Configuration de l application
from typing import Literal, Optional

from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    FLASK_ENV: str = "production"
    SECRET_KEY: str = "change-me"

    # serveur smtp (gmail par defaut, mot de passe d application)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[EmailStr] = None
    SMTP_PASS: Optional[str] = None
    SMTP_USE_TLS: bool = True
    # "memory" garde les courriels en memoire (developpement local)
    MAIL_BACKEND: Literal["smtp", "memory"] = "smtp"

    # boite de reception de l entreprise, destinataire de la copie signee
    BUSINESS_EMAIL: EmailStr = "info@logipret.ca"
    COMPANY_NAME: str = "LogiPret"

    # gabarit du contrat: chemin local ou url http(s)
    CONTRACT_PDF: str = "contract.pdf"
    # layout json (positions ou champs nommes); vide = layout par coordonnees fourni
    PDF_LAYOUT: Optional[str] = None
    TEMPLATE_FETCH_TIMEOUT: float = 10
    MAX_PDF_SIZE_MB: int = 10
    # nombre de proxys de confiance devant l application (X-Forwarded-For); 0 = aucun
    PROXY_FIX_X_FOR: int = 0

    # URI de la base de donnees: Postgres en prod ou sqlite en local
    SQLALCHEMY_DATABASE_URI: str = "sqlite:////tmp/signature.db"
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FOLDER: Optional[str] = None


def load_settings(**overrides) -> Settings:
    return Settings(**overrides)
