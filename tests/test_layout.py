import json

import pytest

from contract_signature.errors import TemplateError
from contract_signature.layout import DEFAULT_LAYOUT, LAYOUTS_FOLDER, DocumentLayout, load_layout
from contract_signature.pdf_utils import CoordinateStamper, FormFieldFiller, build_filler


def write_layout(tmp_path, data):
    path = tmp_path / "layout.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_default_layout_is_coordinate_stamp():
    layout = load_layout()
    assert layout.mode == "stamp"
    assert [s.source for s in layout.stamps] == ["full_name", "full_address", "full_name"]
    assert isinstance(build_filler(layout), CoordinateStamper)
    assert load_layout(DEFAULT_LAYOUT) == layout


def test_bundled_form_layout():
    layout = load_layout(LAYOUTS_FOLDER / "contract_form.json")
    assert [f.field for f in layout.fields] == [f"Text{i}" for i in range(1, 8)]
    assert layout.fields[3].value == ""
    assert isinstance(build_filler(layout), FormFieldFiller)


def test_missing_layout_file(tmp_path):
    with pytest.raises(TemplateError):
        load_layout(tmp_path / "absent.json")


@pytest.mark.parametrize("data", [
    {"mode": "image", "stamps": []},
    {"mode": "stamp", "stamps": []},
    {"mode": "form", "fields": []},
    {"mode": "stamp", "stamps": [{"name": "nom", "source": "full_name", "x": 1, "y": 1, "font": "Comic Sans"}]},
    {"mode": "stamp", "stamps": [{"name": "nom", "source": "full_name", "value": "x", "x": 1, "y": 1}]},
    {"mode": "stamp", "stamps": [{"name": "nom", "x": 1, "y": 1}]},
    {"mode": "form", "fields": [{"field": "Text1", "source": "full_name", "font_size": 0}]},
])
def test_invalid_layouts_are_rejected(tmp_path, data):
    with pytest.raises(TemplateError):
        load_layout(write_layout(tmp_path, data))


def test_unknown_source_fails_at_fill_time():
    layout = DocumentLayout.model_validate({
        "mode": "stamp",
        "stamps": [{"name": "nom", "source": "numero_client", "x": 10, "y": 10}],
    })
    with pytest.raises(TemplateError):
        layout.stamps[0].resolve({"full_name": "Marie Tremblay"})
