# contract_signature/models.py
from . import db


# modele pour une signature de contrat; id et created_at sont attribues par la base
class ContractSignature(db.Model):
    __tablename__ = "contract_signatures"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(128), nullable=False)
    last_name = db.Column(db.String(128), nullable=False)
    email = db.Column(db.String(256), nullable=False)
    phone = db.Column(db.String(64), nullable=False)
    street_address = db.Column(db.String(256))
    city = db.Column(db.String(128))
    province = db.Column(db.String(64))
    postal_code = db.Column(db.String(16))
    acceptance_text = db.Column(db.Text, nullable=False)
    accepted_contract = db.Column(db.Boolean, nullable=False, default=False)
    accepted_terms = db.Column(db.Boolean)
    accepted_data_processing = db.Column(db.Boolean)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(512))
    signed_at = db.Column(db.DateTime(timezone=True), nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

    @classmethod
    def from_submission(cls, submission):
        client = submission.client
        return cls(
            first_name=client.first_name,
            last_name=client.last_name,
            email=str(client.email),
            phone=client.phone,
            street_address=client.street_address,
            city=client.city,
            province=client.province,
            postal_code=client.postal_code,
            acceptance_text=submission.acceptance_text,
            accepted_contract=submission.consents.get("contract", False),
            accepted_terms=submission.consents.get("terms"),
            accepted_data_processing=submission.consents.get("data_processing"),
            ip_address=submission.ip_address,
            user_agent=submission.user_agent,
            signed_at=submission.signed_at,
        )
