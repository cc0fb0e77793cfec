# contract_signature/pdf_utils.py
import io
import logging
from abc import ABC, abstractmethod
from collections import defaultdict

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError
from PyPDF2.generic import ArrayObject, NameObject
from reportlab.pdfgen import canvas as pdfcanvas

from .errors import FieldNotFoundError, TemplateError

logger = logging.getLogger(__name__)


def read_template(template_bytes: bytes) -> PdfReader:
    # ouverture du gabarit en memoire: chaque remplissage repart des octets d origine
    if not template_bytes:
        raise TemplateError("Gabarit PDF vide")
    try:
        reader = PdfReader(io.BytesIO(template_bytes))
        if len(reader.pages) == 0:
            raise TemplateError("Gabarit PDF sans page")
    except (PdfReadError, ValueError, KeyError) as e:
        raise TemplateError(f"Gabarit PDF illisible: {e}") from e
    return reader


def create_overlay(page_width, page_height, draws):
    # une page transparente avec tous les textes a poser: (x, y_pdf, texte, police, taille)
    packet = io.BytesIO()
    can = pdfcanvas.Canvas(packet, pagesize=(page_width, page_height))
    can.setFillColorRGB(0, 0, 0)  # texte noir
    for x, y, text, font, font_size in draws:
        can.setFont(font, font_size)
        can.drawString(x, y, text)
    can.save()
    packet.seek(0)
    return packet


def merge_overlay(page, overlay_stream):
    overlay_reader = PdfReader(overlay_stream)
    page.merge_page(overlay_reader.pages[0])
    return page


def write_document(pages) -> bytes:
    writer = PdfWriter()
    for page in pages:
        writer.add_page(page)
    out = io.BytesIO()
    writer.write(out)
    return out.getvalue()


def _is_widget(annot) -> bool:
    return "/Subtype" in annot and annot["/Subtype"] == "/Widget"


def _qualified_name(annot) -> str:
    # nom complet du champ: les /T de la chaine des /Parent, separes par des points
    parts = []
    node = annot
    while node is not None:
        if "/T" in node:
            parts.append(str(node["/T"]))
        node = node["/Parent"] if "/Parent" in node else None
    return ".".join(reversed(parts))


def collect_widgets(pages):
    """Retourne {nom du champ: [(numero de page, annotation widget), ...]}."""
    widgets = defaultdict(list)
    for page_num, page in enumerate(pages):
        if "/Annots" not in page:
            continue
        for ref in page["/Annots"]:
            annot = ref.get_object()
            if _is_widget(annot):
                name = _qualified_name(annot)
                if name:
                    widgets[name].append((page_num, annot))
    return widgets


def remove_widgets(page):
    # aplatissement: les widgets disparaissent, les autres annotations (liens) restent
    if "/Annots" not in page:
        return page
    kept = ArrayObject([ref for ref in page["/Annots"] if not _is_widget(ref.get_object())])
    if kept:
        page[NameObject("/Annots")] = kept
    else:
        del page["/Annots"]
    return page


class DocumentFiller(ABC):
    """Remplit un gabarit PDF avec les valeurs d une soumission.

    ``submission`` est un ``SubmissionRecord`` ou un ``ClientData``: tout objet
    exposant ``document_values()``. Le resultat est le PDF serialise.
    """

    mode = None

    @abstractmethod
    def fill(self, template_bytes: bytes, submission) -> bytes:
        ...


class CoordinateStamper(DocumentFiller):
    mode = "stamp"

    def __init__(self, stamps):
        self.stamps = list(stamps)

    def fill(self, template_bytes, submission):
        values = submission.document_values()
        reader = read_template(template_bytes)
        pages = reader.pages

        by_page = defaultdict(list)
        for stamp in self.stamps:
            if stamp.page >= len(pages):
                raise TemplateError(
                    f"Le gabarit a {len(pages)} page(s), le champ {stamp.name} vise la page {stamp.page + 1}"
                )
            by_page[stamp.page].append(stamp)

        for page_num, stamps in sorted(by_page.items()):
            page = pages[page_num]
            box = page.mediabox
            draws = []
            for stamp in stamps:
                # conversion car l origine est en bas dans reportlab
                y_pdf = float(box.top) - stamp.y - stamp.font_size
                draws.append((float(box.left) + stamp.x, y_pdf, stamp.resolve(values), stamp.font, stamp.font_size))
            merge_overlay(page, create_overlay(float(box.right), float(box.top), draws))

        logger.debug(f"{len(self.stamps)} texte(s) pose(s) sur {len(by_page)} page(s)")
        return write_document(pages)


class FormFieldFiller(DocumentFiller):
    mode = "form"

    def __init__(self, mappings):
        self.mappings = list(mappings)

    def fill(self, template_bytes, submission):
        values = submission.document_values()
        reader = read_template(template_bytes)
        pages = reader.pages
        widgets = collect_widgets(pages)

        # premier champ manquant = gabarit et configuration ne correspondent plus
        for mapping in self.mappings:
            if mapping.field not in widgets:
                raise FieldNotFoundError(mapping.field)

        draws = defaultdict(list)
        for mapping in self.mappings:
            text = mapping.resolve(values)
            if not text:
                continue
            for page_num, annot in widgets[mapping.field]:
                x1, y1, x2, y2 = [float(v) for v in annot["/Rect"]]
                height = abs(y2 - y1)
                # texte centre verticalement dans le rectangle du champ
                baseline = min(y1, y2) + (height - mapping.font_size) / 2 + mapping.font_size * 0.25
                draws[page_num].append((min(x1, x2) + 2, baseline, text, mapping.font, mapping.font_size))

        for page_num, page in enumerate(pages):
            remove_widgets(page)
            if draws.get(page_num):
                box = page.mediabox
                merge_overlay(page, create_overlay(float(box.right), float(box.top), draws[page_num]))

        logger.debug(f"{len(self.mappings)} champ(s) rempli(s) et aplati(s)")
        return write_document(pages)


def build_filler(layout) -> DocumentFiller:
    # le mode vient du layout, pas du code appelant
    if layout.mode == "form":
        return FormFieldFiller(layout.fields)
    return CoordinateStamper(layout.stamps)
