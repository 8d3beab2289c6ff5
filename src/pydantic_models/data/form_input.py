from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from loguru import logger

from shared_modules.entity import Debtor
from shared_modules.utils import safe_str

from .invoice_data import BankDetails, Installment, InvoiceData, InvoiceItem, Language

# Eingabe aus dem Rechnungs-Wizard bzw. vom Workflow-Webhook.
# Feldnamen in camelCase (Formular) und snake_case (InvoiceData) werden beide akzeptiert.


def _first(body: Dict[str, Any], *keys: str, default: Any = "") -> Any:
    """Erster gesetzte Wert aus mehreren möglichen Schlüsseln."""
    for key in keys:
        value = body.get(key)
        if value not in (None, ""):
            return value
    return default


def parse_language(value: Any) -> Language:
    """
    "EN" oder "English" -> EN, alles andere -> DE.
    """
    if isinstance(value, Language):
        return value
    text = safe_str(value).strip()
    return Language.EN if text.upper() == "EN" or text.lower() == "english" else Language.DE


def _entries(body: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    """
    Liste von JSON-Objekten unter `key`; fehlt sie, ergibt das eine leere Liste.
    """
    raw = body.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"'{key}' muss eine Liste sein.")
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ValueError(f"'{key}[{index}]' muss ein JSON-Objekt sein.")
    return raw


def _parse_items(raw_items: List[Dict[str, Any]]) -> List[InvoiceItem]:
    items = []
    for raw in raw_items:
        items.append(
            InvoiceItem(
                description=safe_str(_first(raw, "name", "description")),
                quantity=raw.get("quantity"),
                unit=safe_str(_first(raw, "unit", default="hrs")),
                unit_price=_first(raw, "unitPrice", "unit_price", default=0),
            )
        )
    return items


def _parse_installments(raw_installments: List[Dict[str, Any]]) -> List[Installment]:
    return [
        Installment(date=safe_str(raw.get("date")), amount=raw.get("amount"))
        for raw in raw_installments
    ]


def _parse_debtor(body: Dict[str, Any]) -> Debtor:
    nested = body.get("debtor")
    if isinstance(nested, dict):
        return Debtor(**nested)
    return Debtor(
        name=_first(body, "debtorName", "clientName"),
        email=_first(body, "debtorEmail", "clientEmail"),
        street=_first(body, "debtorStreet", "debtorAddress"),
        building=_first(body, "debtorHouse", "debtorBuilding"),
        apartment=_first(body, "debtorApt", "debtorApartment"),
        city=_first(body, "debtorCity", "clientCity"),
        zip=_first(body, "debtorZip", "clientZip"),
        country=_first(body, "debtorCountry", "clientCountry"),
        key=_first(body, "existingClientId", "clientNo"),
    )


def _parse_bank(body: Dict[str, Any]) -> Optional[BankDetails]:
    nested = body.get("bank")
    if isinstance(nested, dict):
        return BankDetails(**{k: safe_str(v) for k, v in nested.items()})
    bank = BankDetails(
        name=safe_str(_first(body, "bankName")),
        swift=safe_str(_first(body, "bankSwift", "swift")),
        iban=safe_str(_first(body, "bankIban", "iban")),
    )
    return None if bank.is_empty else bank


def to_invoice_data(payload: Dict[str, Any], today: Optional[date] = None) -> InvoiceData:
    """
    Wandelt das JSON des Formulars/Webhooks in ein validiertes InvoiceData-Objekt.

    Ein eventuell mitgeliefertes subtotal/total wird ignoriert; die Beträge
    werden immer aus den Positionen neu berechnet.

    Args:
        payload (dict): Formulardaten, optional in {"body": ...} verpackt.
        today (date, optional): Ersatz-Rechnungsdatum, falls issueDate fehlt.
    Returns:
        InvoiceData: Unveränderliches Rechnungsmodell.
    """
    if not isinstance(payload, dict):
        raise ValueError("Rechnungsdaten müssen ein JSON-Objekt sein.")
    body = payload.get("body") or payload
    if not isinstance(body, dict):
        raise ValueError("Rechnungsdaten müssen ein JSON-Objekt sein.")

    if "subtotal" in body or "total" in body:
        logger.debug("Mitgelieferte Summen werden ignoriert und neu berechnet.")

    issue_date = _first(body, "issueDate", "issue_date", default=None)
    if issue_date is None:
        issue_date = (today or date.today()).isoformat()

    invoice = InvoiceData(
        language=parse_language(body.get("language")),
        invoice_number=safe_str(_first(body, "invoiceNumber", "invoice_number")),
        contract_number=_first(body, "contractNumber", "contract_number", default=None),
        issue_date=safe_str(issue_date),
        due_date=safe_str(_first(body, "dueDate", "due_date")),
        debtor=_parse_debtor(body),
        items=_parse_items(_entries(body, "items")),
        discount=_first(body, "discount", default=0),
        note=_first(body, "extraNote", "note", default=None),
        installments=_parse_installments(_entries(body, "installments")),
        bank=_parse_bank(body),
    )
    logger.debug(
        f"Rechnung {invoice.invoice_number} übernommen: {len(invoice.items)} Positionen, "
        f"Rabatt {invoice.discount}%"
    )
    return invoice
