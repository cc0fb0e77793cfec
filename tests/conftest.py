"""
Fixtures partagees: gabarits PDF construits avec reportlab, transport mail
en memoire et client Flask sur une base sqlite en memoire.
"""
import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from config import Settings
from contract_signature import create_app
from contract_signature.email_utils import MemoryMailTransport
from contract_signature.schemas import ClientData, SubmissionRecord

FORM_FIELDS = ["Text1", "Text2", "Text3", "Text4", "Text5", "Text6", "Text7"]


def make_contract_pdf(pages=1):
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for i in range(pages):
        c.setFont("Helvetica", 11)
        c.drawString(72, 740, f"Contrat de service - page {i + 1}")
        c.showPage()
    c.save()
    return buf.getvalue()


def make_form_pdf(field_names=FORM_FIELDS):
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.setFont("Helvetica", 11)
    y = 700
    for name in field_names:
        c.drawString(72, y + 5, f"{name}:")
        c.acroForm.textfield(name=name, x=150, y=y, width=360, height=20,
                             borderStyle="inset", forceBorder=True)
        y -= 40
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def client_payload():
    return {
        "firstName": "Marie",
        "lastName": "Tremblay",
        "email": "m@x.ca",
        "phone": "514-000-0000",
        "streetAddress": "123 rue Principale",
        "city": "Montreal",
        "province": "QC",
        "postalCode": "H2X 1Y4",
    }


@pytest.fixture
def form_payload(client_payload):
    return {
        **client_payload,
        "acceptanceText": "j'accepte",
        "acceptedContract": True,
    }


@pytest.fixture
def client_data(client_payload):
    return ClientData.from_payload(client_payload)


@pytest.fixture
def submission(form_payload):
    return SubmissionRecord.from_form(form_payload, ip_address="10.0.0.1", user_agent="pytest")


@pytest.fixture
def contract_path(tmp_path):
    path = tmp_path / "contract.pdf"
    path.write_bytes(make_contract_pdf())
    return path


@pytest.fixture
def settings(contract_path):
    return Settings(
        SQLALCHEMY_DATABASE_URI="sqlite://",
        MAIL_BACKEND="memory",
        CONTRACT_PDF=str(contract_path),
        BUSINESS_EMAIL="info@logipret.ca",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def transport():
    return MemoryMailTransport()


@pytest.fixture
def app(settings, transport):
    app = create_app(settings, transport=transport)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
