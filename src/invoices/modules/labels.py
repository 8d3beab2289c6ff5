from typing import Dict

from pydantic import BaseModel, ConfigDict

from pydantic_models.data.invoice_data import Language


class LabelSet(BaseModel):
    """
    Alle Beschriftungen einer Sprache für Rechnungsseite und Zahlteil.
    """
    model_config = ConfigDict(frozen=True)

    # Rechnungsseite
    invoice: str
    bill_to: str
    invoice_number: str
    contract_number: str
    invoice_date: str
    due_date: str
    description: str
    quantity: str
    unit: str
    amount: str
    subtotal: str
    discount: str
    total: str
    notes: str
    installments: str
    installment_prefix: str
    bank_details: str
    bank: str
    swift: str
    iban: str
    footer_text: str
    continued: str

    # Zahlteil
    receipt: str
    payment_part: str
    account_payable_to: str
    additional_information: str
    payable_by: str
    currency: str
    acceptance_point: str
    qr_unavailable: str


LABELS: Dict[Language, LabelSet] = {
    Language.EN: LabelSet(
        invoice="INVOICE",
        bill_to="Bill To",
        invoice_number="Invoice Number",
        contract_number="Contract Number",
        invoice_date="Invoice Date",
        due_date="Due Date",
        description="Description",
        quantity="Qty",
        unit="Unit",
        amount="Amount",
        subtotal="Subtotal",
        discount="Discount",
        total="TOTAL",
        notes="Notes",
        installments="Payment Schedule",
        installment_prefix="Payment",
        bank_details="Bank Details",
        bank="Bank",
        swift="SWIFT/BIC",
        iban="IBAN",
        footer_text="Thank you for your business!",
        continued="continued",
        receipt="Receipt",
        payment_part="Payment part",
        account_payable_to="Account / Payable to",
        additional_information="Additional information",
        payable_by="Payable by",
        currency="Currency",
        acceptance_point="Acceptance point",
        qr_unavailable="QR code unavailable",
    ),
    Language.DE: LabelSet(
        invoice="RECHNUNG",
        bill_to="Rechnungsempfänger",
        invoice_number="Rechnungsnummer",
        contract_number="Vertragsnummer",
        invoice_date="Rechnungsdatum",
        due_date="Fälligkeitsdatum",
        description="Beschreibung",
        quantity="Menge",
        unit="Einheit",
        amount="Betrag",
        subtotal="Zwischensumme",
        discount="Rabatt",
        total="GESAMT",
        notes="Notizen",
        installments="Zahlungsplan",
        installment_prefix="Rate",
        bank_details="Bankverbindung",
        bank="Bank",
        swift="SWIFT/BIC",
        iban="IBAN",
        footer_text="Vielen Dank für Ihr Vertrauen!",
        continued="Fortsetzung",
        receipt="Empfangsschein",
        payment_part="Zahlteil",
        account_payable_to="Konto / Zahlbar an",
        additional_information="Zusätzliche Informationen",
        payable_by="Zahlbar durch",
        currency="Währung",
        acceptance_point="Annahmestelle",
        qr_unavailable="QR-Code nicht verfügbar",
    ),
}


def labels_for(language: Language) -> LabelSet:
    """Beschriftungen zur Rechnungssprache (einmal pro Dokument gewählt)."""
    return LABELS[Language(language)]
