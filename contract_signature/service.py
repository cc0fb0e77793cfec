# contract_signature/service.py
import logging
from dataclasses import dataclass
from typing import Optional

from .notifications import DispatchResult
from .recorder import RecordResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionOutcome:
    record: RecordResult
    dispatch: Optional[DispatchResult] = None

    @property
    def success(self) -> bool:
        return self.record.ok and self.dispatch is not None and self.dispatch.success


class SignatureService:
    """Enchaine enregistrement, remplissage du contrat et envoi des deux courriels.

    Les collaborateurs sont fournis par ``create_app``; rien n est garde entre
    deux soumissions.
    """

    def __init__(self, recorder, template_source, filler, dispatcher):
        self.recorder = recorder
        self.template_source = template_source
        self.filler = filler
        self.dispatcher = dispatcher

    def fill_contract(self, submission) -> bytes:
        # le gabarit est relu a chaque fois
        return self.filler.fill(self.template_source.read(), submission)

    def submit(self, submission) -> SubmissionOutcome:
        record = self.recorder.record(submission)
        if not record.ok:
            return SubmissionOutcome(record=record)

        # TemplateError remonte telle quelle a l appelant
        pdf_bytes = self.fill_contract(submission)
        dispatch = self.dispatcher.dispatch(submission.client, pdf_bytes, signed_at=submission.signed_at)
        if not dispatch.success:
            logger.warning(f"Signature {record.signature_id} enregistree mais courriels non envoyes",
                           extra={"signature_id": record.signature_id})
        return SubmissionOutcome(record=record, dispatch=dispatch)
