import io

import pytest
from PyPDF2 import PdfReader

from conftest import FORM_FIELDS, make_contract_pdf, make_form_pdf
from contract_signature.errors import FieldNotFoundError, TemplateError
from contract_signature.layout import LAYOUTS_FOLDER, DocumentLayout, load_layout
from contract_signature.pdf_utils import (
    CoordinateStamper,
    DocumentFiller,
    FormFieldFiller,
    build_filler,
    collect_widgets,
)


def page_text(pdf_bytes, page_num=0):
    return PdfReader(io.BytesIO(pdf_bytes)).pages[page_num].extract_text()


def stamp_layout(stamps):
    return DocumentLayout.model_validate({"mode": "stamp", "stamps": stamps})


class TestCoordinateStamper:

    def test_default_layout_stamps_name_and_address(self, submission):
        filler = build_filler(load_layout())
        template = make_contract_pdf()
        out = filler.fill(template, submission)
        assert out.startswith(b"%PDF")
        text = page_text(out)
        assert "Marie Tremblay" in text
        assert "123 rue Principale, Montreal, QC H2X 1Y4" in text
        assert "Contrat de service" in text

    def test_template_is_left_untouched(self, submission):
        template = make_contract_pdf()
        original = bytes(template)
        build_filler(load_layout()).fill(template, submission)
        assert template == original
        assert "Marie" not in page_text(template)

    def test_stamps_on_the_designated_page(self, submission):
        layout = stamp_layout([
            {"name": "nom", "source": "full_name", "page": 1, "x": 72, "y": 100},
            {"name": "texte", "value": "Lu et approuve", "page": 1, "x": 72, "y": 130, "font": "Times-Roman"},
        ])
        out = CoordinateStamper(layout.stamps).fill(make_contract_pdf(pages=2), submission)
        assert "Marie Tremblay" not in page_text(out, 0)
        assert "Marie Tremblay" in page_text(out, 1)
        assert "Lu et approuve" in page_text(out, 1)
        assert len(PdfReader(io.BytesIO(out)).pages) == 2

    def test_filler_base_is_abstract(self):
        with pytest.raises(TypeError):
            DocumentFiller()
        assert isinstance(build_filler(load_layout()), DocumentFiller)

    def test_too_few_pages_raises_template_error(self, submission):
        layout = stamp_layout([{"name": "signature", "source": "full_name", "page": 2, "x": 72, "y": 100}])
        with pytest.raises(TemplateError, match="page 3"):
            CoordinateStamper(layout.stamps).fill(make_contract_pdf(pages=1), submission)

    def test_works_with_client_data_only(self, client_data):
        out = build_filler(load_layout()).fill(make_contract_pdf(), client_data)
        assert "Marie Tremblay" in page_text(out)

    @pytest.mark.parametrize("template", [b"", b"ceci n est pas un pdf"])
    def test_unreadable_template(self, submission, template):
        with pytest.raises(TemplateError):
            build_filler(load_layout()).fill(template, submission)


class TestFormFieldFiller:

    @pytest.fixture
    def filler(self):
        return build_filler(load_layout(LAYOUTS_FOLDER / "contract_form.json"))

    def test_template_fields_are_detected(self):
        reader = PdfReader(io.BytesIO(make_form_pdf()))
        assert sorted(collect_widgets(reader.pages)) == sorted(FORM_FIELDS)

    def test_fills_every_mapped_field(self, filler, submission):
        out = filler.fill(make_form_pdf(), submission)
        text = page_text(out)
        assert text.count("Marie Tremblay") == 3
        assert "123 rue Principale, Montreal, QC H2X 1Y4" in text
        assert "514-000-0000" in text
        assert "m@x.ca" in text

    def test_form_is_flattened(self, filler, submission):
        out = filler.fill(make_form_pdf(), submission)
        reader = PdfReader(io.BytesIO(out))
        assert collect_widgets(reader.pages) == {}
        assert "/AcroForm" not in reader.trailer["/Root"]
        assert not reader.get_fields()

    def test_missing_field_is_named(self, filler, submission):
        template = make_form_pdf([name for name in FORM_FIELDS if name != "Text7"])
        with pytest.raises(FieldNotFoundError) as exc:
            filler.fill(template, submission)
        assert exc.value.field_name == "Text7"
        assert "Text7" in str(exc.value)

    def test_first_missing_field_is_reported(self, filler, submission):
        template = make_form_pdf(["Text1", "Text3", "Text4", "Text6", "Text7"])
        with pytest.raises(FieldNotFoundError) as exc:
            filler.fill(template, submission)
        assert exc.value.field_name == "Text2"

    def test_missing_field_is_a_template_error(self, filler, submission):
        with pytest.raises(TemplateError):
            filler.fill(make_contract_pdf(), submission)

    def test_extra_template_fields_are_flattened_too(self, submission):
        layout = DocumentLayout.model_validate({"mode": "form", "fields": [{"field": "Text1", "source": "full_name"}]})
        out = FormFieldFiller(layout.fields).fill(make_form_pdf(), submission)
        reader = PdfReader(io.BytesIO(out))
        assert collect_widgets(reader.pages) == {}
        assert page_text(out).count("Marie Tremblay") == 1
