# contract_signature/schemas.py
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

# retours a la ligne et autres caracteres de controle: interdits dans les en-tetes de courriel
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")

# cles des cases a cocher du formulaire -> nom du consentement
CONSENT_KEYS = {
    "acceptedContract": "contract",
    "acceptedTerms": "terms",
    "acceptedDataProcessing": "data_processing",
}


def _error_fields(exc: PydanticValidationError) -> List[str]:
    fields = []
    for err in exc.errors():
        loc = [str(p) for p in err["loc"] if p != "client"]
        name = ".".join(loc) or "payload"
        if name not in fields:
            fields.append(name)
    return fields


def _validation_error(exc: PydanticValidationError) -> ValidationError:
    fields = _error_fields(exc)
    return ValidationError("Donnees requises manquantes ou invalides: " + ", ".join(fields), fields)


class ClientData(BaseModel):
    """Informations personnelles du client, telles que saisies dans le formulaire."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, populate_by_name=True)

    first_name: str = Field(min_length=1, alias="firstName")
    last_name: str = Field(min_length=1, alias="lastName")
    email: EmailStr
    phone: str = Field(min_length=1)
    # adresse structuree facultative
    street_address: Optional[str] = Field(default=None, alias="streetAddress")
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = Field(default=None, alias="postalCode")

    @field_validator("first_name", "last_name", "phone", "street_address", "city", "province", "postal_code")
    @classmethod
    def no_control_characters(cls, value):
        if value and CONTROL_CHARS.search(value):
            raise ValueError("caracteres de controle interdits")
        return value

    @field_validator("street_address", "city", "province", "postal_code")
    @classmethod
    def blank_as_missing(cls, value):
        return value or None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def full_address(self) -> str:
        # "rue, ville, province code-postal" en sautant les parties absentes
        locality = " ".join(p for p in (self.province, self.postal_code) if p)
        return ", ".join(p for p in (self.street_address, self.city, locality) if p)

    def document_values(self) -> Dict[str, str]:
        # valeurs disponibles pour les champs du gabarit (cle "source" du layout)
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "full_address": self.full_address,
            "street_address": self.street_address or "",
            "city": self.city or "",
            "province": self.province or "",
            "postal_code": self.postal_code or "",
            "phone": self.phone,
            "email": str(self.email),
        }

    @classmethod
    def from_payload(cls, payload: Any) -> "ClientData":
        if not isinstance(payload, Mapping):
            raise ValidationError("Donnees requises manquantes", ["clientData"])
        try:
            return cls.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise _validation_error(e) from e


class SubmissionRecord(BaseModel):
    """Enregistrement immuable d une signature, cree une fois par soumission."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, populate_by_name=True)

    client: ClientData
    acceptance_text: str = Field(min_length=1, alias="acceptanceText")
    consents: Dict[str, bool]
    signed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @field_validator("consents")
    @classmethod
    def all_consents_given(cls, value: Dict[str, bool]) -> Dict[str, bool]:
        if not value:
            raise ValueError("au moins un consentement est requis")
        refused = sorted(name for name, given in value.items() if not given)
        if refused:
            raise ValueError("consentements refuses: " + ", ".join(refused))
        return value

    def document_values(self) -> Dict[str, str]:
        values = self.client.document_values()
        values["acceptance_text"] = self.acceptance_text
        values["signed_at"] = self.signed_at.strftime("%Y-%m-%d %H:%M")
        values["signed_date"] = self.signed_at.strftime("%Y-%m-%d")
        return values

    @classmethod
    def from_form(cls, payload: Any, ip_address=None, user_agent=None) -> "SubmissionRecord":
        """Construit l enregistrement a partir du JSON du formulaire.

        Le contrat doit etre accepte (``acceptedContract``); les autres cases
        ne sont prises en compte que si le formulaire les envoie.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("Donnees requises manquantes", ["payload"])
        client = ClientData.from_payload(payload.get("clientData", payload))

        consents = {"contract": payload.get("acceptedContract", False)}
        for key, name in CONSENT_KEYS.items():
            if key in payload and name not in consents:
                consents[name] = payload[key]
        try:
            return cls.model_validate({
                "client": client,
                "acceptanceText": payload.get("acceptanceText", ""),
                "consents": consents,
                "ip_address": ip_address,
                "user_agent": user_agent,
            })
        except PydanticValidationError as e:
            raise _validation_error(e) from e
