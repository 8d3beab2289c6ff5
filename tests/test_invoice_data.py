from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pydantic_models.data.form_input import parse_language, to_invoice_data
from pydantic_models.data.invoice_data import InvoiceData, InvoiceItem, Language


def test_totals_are_recomputed(invoice_de):
    assert invoice_de.subtotal == Decimal("1650")
    assert invoice_de.discount_amount == Decimal("165")
    assert invoice_de.total == Decimal("1485")


def test_line_total_is_not_stored():
    item = InvoiceItem(description="Kurs", quantity=20, unit_price=75)
    assert item.line_total == Decimal("1500")
    assert "line_total" not in item.model_dump()


def test_non_numeric_values_become_zero():
    item = InvoiceItem(quantity="abc", unit_price=None)
    assert item.quantity == 0
    assert item.unit_price == 0


@pytest.mark.parametrize("raw, expected", [(150, Decimal("100")), (-5, Decimal("0")), ("12,5", Decimal("12.5"))])
def test_discount_is_clamped(raw, expected):
    assert InvoiceData(invoice_number="1", discount=raw).discount == expected


def test_invoice_is_immutable(invoice_de):
    with pytest.raises(ValidationError):
        invoice_de.discount = Decimal("0")


def test_supplied_totals_are_ignored():
    invoice = to_invoice_data(
        {
            "invoiceNumber": "9",
            "items": [{"name": "Kurs", "quantity": 2, "unitPrice": 50}],
            "subtotal": 9999,
            "total": 1,
        }
    )
    assert invoice.total == Decimal("100")


@pytest.mark.parametrize(
    "raw, expected",
    [("English", Language.EN), ("EN", Language.EN), ("en", Language.EN), ("German", Language.DE), (None, Language.DE)],
)
def test_parse_language(raw, expected):
    assert parse_language(raw) == expected


def test_form_fields_are_mapped(invoice_en):
    assert invoice_en.language == Language.EN
    assert invoice_en.invoice_number == "2024/IN/001"
    assert invoice_en.contract_number == "CNT-2024-001"
    assert invoice_en.debtor.name == "John Smith"
    assert invoice_en.debtor.address_line == "Main Street 123, Apt 4B"
    assert invoice_en.debtor.zip_city == "8001 Zurich"
    assert [item.unit for item in invoice_en.items] == ["hrs", "pcs"]
    assert len(invoice_en.installments) == 2
    assert invoice_en.installments[0].amount == Decimal("742.5")
    assert invoice_en.note.startswith("Thank you")


def test_defaults_for_missing_fields():
    invoice = to_invoice_data({"invoiceNumber": "3", "contractNumber": "  "}, today=date(2024, 5, 6))

    assert invoice.issue_date == "2024-05-06"
    assert invoice.contract_number is None
    assert invoice.note is None
    assert invoice.discount == 0
    assert invoice.bank is None
    assert not invoice.has_installments
    assert invoice.language == Language.DE


def test_bank_override_from_form():
    invoice = to_invoice_data({"invoiceNumber": "4", "bankName": "PostFinance", "bankIban": "CH44 3199 9123 0008 8901 2"})
    assert invoice.bank.name == "PostFinance"
    assert invoice.bank.iban == "CH44 3199 9123 0008 8901 2"


def test_snake_case_payload_is_accepted():
    invoice = to_invoice_data(
        {
            "invoice_number": "5",
            "debtor": {"name": "Firma AG", "zip": 3000, "city": "Bern"},
            "items": [{"description": "Workshop", "quantity": 1, "unit_price": "800"}],
        }
    )
    assert invoice.debtor.zip == "3000"
    assert invoice.total == Decimal("800")


def test_non_object_payload_is_rejected():
    with pytest.raises(ValueError):
        to_invoice_data(["not", "an", "object"])
    with pytest.raises(ValueError):
        to_invoice_data({"body": "text"})
