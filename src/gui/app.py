from typing import Optional

from flask import Flask, Response, jsonify, request
from loguru import logger

from contracts.modules.contract_submitter import (
    ContractSubmitter,
    WebhookConfigurationError,
    WebhookSubmissionError,
)
from invoices.modules.invoice_factory import (
    PDF_CONTENT_TYPE,
    InvoiceFactory,
    InvoiceInputError,
    InvoiceRenderError,
)
from invoices.modules.sample_data import sample_payload
from pydantic_models.data.form_input import parse_language
from pydantic_models.data.invoice_data import Language
from sheets.modules.sheets_client import SheetsClient, SheetsConfigurationError, SheetsUnavailableError
from shared_modules.config import Config


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content,
        mimetype=PDF_CONTENT_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Content-Length": str(len(content)),
        },
    )


def create_app(
    config: Optional[Config] = None,
    sheets_client: Optional[SheetsClient] = None,
    submitter: Optional[ContractSubmitter] = None,
) -> Flask:
    """
    Erzeugt die Flask-App für Rechnungsformular und Dashboard.
    Tabellen- und Webhook-Zugriff können für Tests ersetzt werden.
    """
    config = config or Config()
    app = Flask(__name__)
    app.secret_key = config.get_secret("FLASK_SECRET_KEY", "unsicherer_fallback")

    factory = InvoiceFactory(config)
    sheets = sheets_client or SheetsClient(config)
    contracts = submitter or ContractSubmitter(config)

    @app.errorhandler(InvoiceInputError)
    def invalid_invoice(e: InvoiceInputError):
        return jsonify(error="Invalid invoice data", message=str(e)), 400

    @app.errorhandler(InvoiceRenderError)
    def render_failed(e: InvoiceRenderError):
        return jsonify(error="Failed to generate PDF", message=str(e)), 500

    @app.errorhandler(SheetsConfigurationError)
    def sheets_not_configured(e: SheetsConfigurationError):
        logger.error(f"Google Sheets nicht konfiguriert: {e}")
        return jsonify(error=f"Server configuration error: {e}", message=str(e)), 500

    @app.errorhandler(SheetsUnavailableError)
    def sheets_unavailable(e: SheetsUnavailableError):
        return jsonify(error="Failed to read spreadsheet", message=str(e)), 500

    @app.errorhandler(WebhookConfigurationError)
    def webhook_not_configured(e: WebhookConfigurationError):
        return jsonify(error=str(e), message=str(e)), 500

    @app.errorhandler(WebhookSubmissionError)
    def webhook_failed(e: WebhookSubmissionError):
        # Immer 500 an den Client, der Status des Webhooks steht in der Antwort
        return jsonify(error="Webhook submission failed", message=str(e), status=e.status), 500

    @app.post("/api/generate-invoice")
    def generate_invoice():
        payload = request.get_json(silent=True)
        if payload is None:
            raise InvoiceInputError("Request body must be JSON")
        generated = factory.generate(payload)
        return _pdf_response(generated.content, generated.filename)

    @app.get("/api/generate-invoice")
    def generate_sample_invoice():
        # ?lang=en|english|de|german, Standard Deutsch
        language = parse_language(request.args.get("lang", "german"))
        generated = factory.generate(sample_payload(language))
        suffix = "en" if language == Language.EN else "de"
        return _pdf_response(generated.content, f"sample-invoice-{suffix}.pdf")

    @app.get("/api/clients")
    def clients():
        return jsonify([client.as_json() for client in sheets.fetch_clients()])

    @app.get("/api/contracts")
    def contract_list():
        return jsonify([contract.as_json() for contract in sheets.fetch_contracts()])

    @app.get("/api/invoices")
    def invoices():
        return jsonify([invoice.as_json() for invoice in sheets.fetch_invoices()])

    @app.get("/api/sheets-info")
    def sheets_info():
        return jsonify(sheets.sheets_info())

    @app.post("/api/submit-contract")
    def submit_contract():
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify(error="Failed to submit contract", message="Request body must be JSON"), 400
        return jsonify(contracts.submit(payload))

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
