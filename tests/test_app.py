import pytest

from contracts.modules.contract_submitter import WebhookSubmissionError
from gui.app import create_app
from invoices.modules.sample_data import sample_payload
from pydantic_models.data.invoice_data import Language
from sheets.modules.row_parser import parse_client_row, parse_invoice_row
from sheets.modules.sheets_client import SheetsConfigurationError


class FakeSheets:
    def __init__(self, error=None):
        self.error = error

    def _check(self):
        if self.error:
            raise self.error

    def fetch_clients(self):
        self._check()
        return [parse_client_row(["C-001", "", "Anna", "Muster"], 0)]

    def fetch_contracts(self):
        self._check()
        return []

    def fetch_invoices(self):
        self._check()
        return [parse_invoice_row(["2024/IN/001", "", "Anna Muster", "", "1485", "CHF", "DE", "", "", "paid"], 0)]

    def sheets_info(self):
        self._check()
        return {"spreadsheetId": "sheet-123", "sheets": []}


class FakeSubmitter:
    def __init__(self, error=None):
        self.error = error
        self.payloads = []

    def submit(self, payload):
        if self.error:
            raise self.error
        self.payloads.append(payload)
        return {"success": True}


@pytest.fixture
def submitter():
    return FakeSubmitter()


@pytest.fixture
def client(config, submitter):
    app = create_app(config, sheets_client=FakeSheets(), submitter=submitter)
    app.testing = True
    return app.test_client()


def test_generate_invoice_returns_pdf(client):
    response = client.post("/api/generate-invoice", json=sample_payload(Language.DE))

    assert response.status_code == 200
    assert response.mimetype == "application/pdf"
    assert response.headers["Content-Disposition"] == 'attachment; filename="invoice-2024-IN-001.pdf"'
    assert response.data.startswith(b"%PDF")
    assert int(response.headers["Content-Length"]) == len(response.data)


def test_generate_invoice_rejects_invalid_json(client):
    response = client.post("/api/generate-invoice", data="kein json", content_type="text/plain")
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid invoice data"

    response = client.post("/api/generate-invoice", json={"body": "text"})
    assert response.status_code == 400


@pytest.mark.parametrize(
    "payload",
    [
        {"invoiceNumber": "1", "items": ["Kurs"]},
        {"invoiceNumber": "1", "items": "Kurs"},
        {"invoiceNumber": "1", "installments": [42]},
    ],
)
def test_generate_invoice_rejects_malformed_lists(client, payload):
    response = client.post("/api/generate-invoice", json=payload)

    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid invoice data"


def test_sample_invoice(client):
    response = client.get("/api/generate-invoice?lang=en")

    assert response.status_code == 200
    assert 'filename="sample-invoice-en.pdf"' in response.headers["Content-Disposition"]
    assert 'sample-invoice-de.pdf' in client.get("/api/generate-invoice").headers["Content-Disposition"]


def test_lists_from_spreadsheet(client):
    clients = client.get("/api/clients").get_json()
    assert clients[0]["fullName"] == "Anna Muster"

    assert client.get("/api/contracts").get_json() == []

    invoices = client.get("/api/invoices").get_json()
    assert invoices[0]["invoiceNumber"] == "2024/IN/001"
    assert invoices[0]["status"] == "paid"

    assert client.get("/api/sheets-info").get_json()["spreadsheetId"] == "sheet-123"


def test_missing_sheets_configuration(config):
    app = create_app(config, sheets_client=FakeSheets(SheetsConfigurationError("Missing spreadsheet ID")))
    response = app.test_client().get("/api/clients")

    assert response.status_code == 500
    assert response.get_json()["error"] == "Server configuration error: Missing spreadsheet ID"


def test_submit_contract(client, submitter):
    response = client.post("/api/submit-contract", json={"clientName": "Anna"})

    assert response.status_code == 200
    assert response.get_json() == {"success": True}
    assert submitter.payloads == [{"clientName": "Anna"}]


def test_submit_contract_failure_is_reported_as_500(config):
    failing = FakeSubmitter(WebhookSubmissionError("n8n webhook not found.", 404))
    response = create_app(config, sheets_client=FakeSheets(), submitter=failing).test_client().post(
        "/api/submit-contract", json={}
    )

    assert response.status_code == 500
    body = response.get_json()
    assert body["error"] == "Webhook submission failed"
    assert body["status"] == 404


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}
