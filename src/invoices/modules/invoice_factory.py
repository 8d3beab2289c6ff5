from datetime import date
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from pydantic_models.data.form_input import to_invoice_data
from pydantic_models.data.invoice_data import InvoiceData
from shared_modules.config import Config
from shared_modules.entity import Creditor
from shared_modules.utils import safe_filename

from .invoice_layout import InvoiceLayout
from .qr_payload import build_qr_payload, resolve_creditor
from .qr_renderer import QrRenderer

PDF_CONTENT_TYPE = "application/pdf"


class InvoiceRenderError(RuntimeError):
    """
    Das Rechnungsdokument konnte nicht erzeugt werden.
    """


class InvoiceInputError(ValueError):
    """
    Die Formulardaten ergeben keine gültige Rechnung.
    """


class GeneratedInvoice(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    content_type: str = PDF_CONTENT_TYPE


def invoice_filename(invoice_number: str) -> str:
    """
    Dateiname für den Download, z. B. "invoice-2024-IN-001.pdf".
    """
    return f"invoice-{safe_filename(invoice_number)}.pdf"


class InvoiceFactory:
    """
    Factory für Rechnungen mit QR-Zahlteil.

    Ablauf: Formulardaten -> InvoiceData -> SPC-Text -> QR-Bild -> PDF.
    Jeder Aufruf arbeitet mit eigenen Puffern; die Factory selbst hält nur die
    Konfiguration und kann von mehreren Requests gleichzeitig genutzt werden.
    """

    def __init__(self, config: Config):
        """
        Initialisiert die Factory mit einer Pydantic-basierten Konfiguration.
        Args:
            config (Config): Singleton-Konfiguration mit Pydantic-Modell.
        """
        self.config: Config = config
        self.renderer: QrRenderer = QrRenderer.from_config(config.qr_bill)
        self.layout: InvoiceLayout = InvoiceLayout(config.formatting)

    def build_invoice(self, payload: Dict[str, Any], today: Optional[date] = None) -> InvoiceData:
        """
        Übernimmt die Formulardaten. Ungültige Eingaben ergeben InvoiceInputError.
        """
        try:
            return to_invoice_data(payload, today=today)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Ungültige Rechnungsdaten: {e}")
            raise InvoiceInputError(f"Ungültige Rechnungsdaten: {e}") from e

    def resolve_creditor(self, invoice: InvoiceData) -> Creditor:
        return resolve_creditor(invoice, self.config.creditor)

    def create_qr_payload(self, invoice: InvoiceData, creditor: Optional[Creditor] = None) -> str:
        return build_qr_payload(invoice, creditor or self.resolve_creditor(invoice))

    def create_pdf(self, invoice: InvoiceData) -> bytes:
        """
        Erzeugt das vollständige PDF (Rechnungsseite(n) + Zahlteil).

        Ein fehlgeschlagener QR-Code führt nur zu einem Platzhalter; alle
        anderen Fehler beim Setzen werden als InvoiceRenderError gemeldet.

        Args:
            invoice (InvoiceData): Validierte Rechnungsdaten.
        Returns:
            bytes: PDF-Dokument.
        Raises:
            InvoiceRenderError: Wenn das Dokument nicht erzeugt werden kann.
        """
        try:
            creditor = self.resolve_creditor(invoice)
            payload = self.create_qr_payload(invoice, creditor)
            qr_png = self.renderer.render(payload)
            if qr_png is None:
                logger.warning(f"Rechnung {invoice.invoice_number} wird ohne QR-Code erstellt.")
            content = self.layout.render(invoice, creditor, qr_png)
        except Exception as e:
            logger.error(f"PDF für Rechnung {invoice.invoice_number} fehlgeschlagen: {e}")
            raise InvoiceRenderError(f"PDF-Erzeugung fehlgeschlagen: {e}") from e
        logger.info(f"Rechnung {invoice.invoice_number} erzeugt ({len(content)} Bytes).")
        return content

    def generate(self, payload: Dict[str, Any], today: Optional[date] = None) -> GeneratedInvoice:
        """
        Kompletter Durchlauf vom Formular-JSON bis zum fertigen Download.
        """
        invoice = self.build_invoice(payload, today=today)
        return GeneratedInvoice(
            filename=invoice_filename(invoice.invoice_number),
            content=self.create_pdf(invoice),
        )
