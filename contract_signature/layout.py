# contract_signature/layout.py
# description declarative du remplissage du gabarit (positions ou champs nommes)
import json
import logging
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator, model_validator
from reportlab.pdfbase._fontdata import standardFonts

from .errors import TemplateError

logger = logging.getLogger(__name__)

LAYOUTS_FOLDER = Path(__file__).resolve().parent / "layouts"
DEFAULT_LAYOUT = LAYOUTS_FOLDER / "contract_stamp.json"


class _ValueSource(BaseModel):
    # une valeur vient soit d une cle derivee de la soumission, soit d un texte fixe
    source: Optional[str] = None
    value: Optional[str] = None

    @model_validator(mode="after")
    def one_of_source_or_value(self):
        if (self.source is None) == (self.value is None):
            raise ValueError("indiquer soit 'source', soit 'value'")
        return self

    def resolve(self, values):
        if self.value is not None:
            return self.value
        if self.source not in values:
            raise TemplateError(f"Source de valeur inconnue: {self.source}")
        return values[self.source]


class StampField(_ValueSource):
    name: str
    page: int = Field(default=0, ge=0)
    x: float
    # distance depuis le haut de la page, comme dans l editeur de champs
    y: float
    font: str = "Helvetica"
    font_size: float = Field(default=12, gt=0)

    @field_validator("font")
    @classmethod
    def standard_font(cls, value):
        if value not in standardFonts:
            raise ValueError(f"police non standard: {value}")
        return value


class FormFieldMapping(_ValueSource):
    field: str
    font: str = "Helvetica"
    font_size: float = Field(default=10, gt=0)

    @field_validator("font")
    @classmethod
    def standard_font(cls, value):
        if value not in standardFonts:
            raise ValueError(f"police non standard: {value}")
        return value


class DocumentLayout(BaseModel):
    mode: Literal["stamp", "form"]
    stamps: List[StampField] = Field(default_factory=list)
    fields: List[FormFieldMapping] = Field(default_factory=list)

    @model_validator(mode="after")
    def entries_for_mode(self):
        if self.mode == "stamp" and not self.stamps:
            raise ValueError("le mode 'stamp' demande au moins une entree dans 'stamps'")
        if self.mode == "form" and not self.fields:
            raise ValueError("le mode 'form' demande au moins une entree dans 'fields'")
        return self


def load_layout(path=None) -> DocumentLayout:
    # lecture du fichier json de layout
    path = Path(path) if path else DEFAULT_LAYOUT
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        layout = DocumentLayout.model_validate(data)
    except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
        raise TemplateError(f"Layout illisible ({path}): {e}") from e
    logger.info(f"Layout charge: {path.name} (mode {layout.mode})")
    return layout
