# contract_signature/notifications.py
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape
from werkzeug.utils import secure_filename

from .email_utils import Attachment, NotificationMessage
from .errors import TransportError

logger = logging.getLogger(__name__)

BUSINESS = "business"
CLIENT = "client"


@dataclass(frozen=True)
class SendOutcome:
    role: str
    recipient: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class DispatchResult:
    """Resultat des deux envois.

    ``success`` ne vaut vrai que si les deux courriels sont partis; le detail
    par destinataire reste disponible dans ``outcomes``.
    """

    outcomes: Tuple[SendOutcome, ...]

    @property
    def success(self) -> bool:
        return bool(self.outcomes) and all(o.ok for o in self.outcomes)

    @property
    def first_error(self) -> Optional[str]:
        return next((o.error for o in self.outcomes if not o.ok), None)

    def outcome_for(self, role) -> Optional[SendOutcome]:
        return next((o for o in self.outcomes if o.role == role), None)

    def to_list(self):
        return [asdict(o) for o in self.outcomes]


def default_environment() -> Environment:
    return Environment(
        loader=PackageLoader("contract_signature", "templates/email"),
        autoescape=select_autoescape(["html"]),
    )


class NotificationDispatcher:
    def __init__(self, transport, business_email, company_name="LogiPret", environment=None):
        self.transport = transport
        self.business_email = str(business_email)
        self.company_name = company_name
        self.environment = environment or default_environment()

    def _render(self, name, **context):
        return self.environment.get_template(name).render(**context)

    def build_messages(self, client, pdf_bytes: bytes, signed_at=None):
        # copie pour l entreprise puis copie pour le client, meme pdf
        signed_at = signed_at or datetime.now(timezone.utc)
        context = {
            "client": client,
            "signed_at": signed_at,
            "business_email": self.business_email,
            "company_name": self.company_name,
        }
        business = NotificationMessage(
            recipient=self.business_email,
            subject=f"Nouvelle signature de contrat - {client.full_name}",
            html_body=self._render("business.html", **context),
            text_body=f"Nouveau contrat signe par {client.full_name} ({client.email}).",
            attachments=(Attachment(
                secure_filename(f"Contrat_{client.last_name}_{client.first_name}.pdf"), pdf_bytes),),
        )
        to_client = NotificationMessage(
            recipient=str(client.email),
            subject="Confirmation de signature - Votre contrat",
            html_body=self._render("client.html", **context),
            text_body="Votre signature electronique a bien ete enregistree. Le contrat signe est joint.",
            attachments=(Attachment(
                secure_filename(f"Votre_Contrat_{client.last_name}_{client.first_name}.pdf"), pdf_bytes),),
        )
        return business, to_client

    def dispatch(self, client, pdf_bytes: bytes, signed_at=None) -> DispatchResult:
        business, to_client = self.build_messages(client, pdf_bytes, signed_at)
        started = time.monotonic()

        # les deux envois partent en parallele, on attend les deux
        with ThreadPoolExecutor(max_workers=2) as pool:
            pending = [
                (BUSINESS, business, pool.submit(self.transport.send, business)),
                (CLIENT, to_client, pool.submit(self.transport.send, to_client)),
            ]
            outcomes = []
            for role, message, future in pending:
                try:
                    future.result()
                except TransportError as e:
                    logger.warning(f"Envoi {role} echoue pour {message.recipient}: {e}",
                                   extra={"role": role, "recipient": message.recipient})
                    outcomes.append(SendOutcome(role, message.recipient, False, str(e)))
                else:
                    outcomes.append(SendOutcome(role, message.recipient, True))

        result = DispatchResult(tuple(outcomes))
        duration_ms = int((time.monotonic() - started) * 1000)
        if result.success:
            logger.info(f"Courriels de signature envoyes pour {client.full_name}",
                        extra={"duration_ms": duration_ms})
        else:
            logger.error(f"Echec d envoi des courriels pour {client.full_name}: {result.first_error}",
                         extra={"duration_ms": duration_ms})
        return result
