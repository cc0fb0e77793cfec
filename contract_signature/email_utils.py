# contract_signature/email_utils.py
import logging
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Optional, Tuple

from .errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes = field(repr=False)
    media_type: str = "application/pdf"


@dataclass(frozen=True)
class NotificationMessage:
    recipient: str
    subject: str
    html_body: str = field(repr=False)
    attachments: Tuple[Attachment, ...] = ()
    text_body: Optional[str] = field(default=None, repr=False)


def build_email_message(message: NotificationMessage, sender) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = message.subject
    msg["From"] = sender
    msg["To"] = message.recipient
    # version texte pour les clients mail sans html
    msg.set_content(message.text_body or "Veuillez trouver ci-joint le document signe.")
    msg.add_alternative(message.html_body, subtype="html")
    for attachment in message.attachments:
        maintype, _, subtype = attachment.media_type.partition("/")
        msg.add_attachment(attachment.content, maintype=maintype, subtype=subtype or "octet-stream",
                           filename=attachment.filename)
    return msg


class SmtpMailTransport:
    """Envoi par SMTP; une connexion est ouverte puis fermee a chaque message."""

    def __init__(self, host, port, user=None, password=None, use_tls=True, sender=None):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.sender = sender or user

    def send(self, message: NotificationMessage):
        try:
            msg = build_email_message(message, self.sender)
            with smtplib.SMTP(self.host, self.port) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.user and self.password:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (ValueError, TypeError) as e:
            # en-tete invalide (retour a la ligne, type inattendu)
            logger.error(f"Message invalide pour {message.recipient}: {e}")
            raise TransportError(f"Message invalide pour {message.recipient}: {e}") from e
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Echec envoi email a {message.recipient}: {e}")
            raise TransportError(f"Echec envoi email a {message.recipient}: {e}") from e
        logger.info(f"Email envoye a {message.recipient}", extra={"recipient": message.recipient})


class MemoryMailTransport:
    # transport en memoire: garde les messages, peut refuser certains destinataires
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, message: NotificationMessage):
        if message.recipient in self.fail_for:
            raise TransportError(f"Destinataire refuse: {message.recipient}")
        self.sent.append(message)
