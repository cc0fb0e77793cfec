# contract_signature/recorder.py
import itertools
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .errors import TransportError
from .models import ContractSignature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordResult:
    ok: bool
    signature_id: Optional[int] = None
    # TransportError quand la base refuse l ecriture
    error: Optional[TransportError] = None


class SqlSubmissionRecorder:
    """Insere les signatures dans la table contract_signatures."""

    def __init__(self, db):
        self.db = db

    def record(self, submission) -> RecordResult:
        row = ContractSignature.from_submission(submission)
        try:
            self.db.session.add(row)
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            error = TransportError(f"Echec de l enregistrement de la signature: {e}")
            error.__cause__ = e
            logger.error(str(error))
            return RecordResult(ok=False, error=error)
        logger.info(f"Signature enregistree pour {submission.client.full_name}",
                    extra={"signature_id": row.id})
        return RecordResult(ok=True, signature_id=row.id)


class MemorySubmissionRecorder:
    # stockage en memoire pour les tests et le developpement local
    def __init__(self, fail=False):
        self.records = {}
        self.fail = fail
        self._ids = itertools.count(1)

    def record(self, submission) -> RecordResult:
        if self.fail:
            return RecordResult(ok=False, error=TransportError("Echec de l enregistrement de la signature"))
        signature_id = next(self._ids)
        self.records[signature_id] = submission
        return RecordResult(ok=True, signature_id=signature_id)
