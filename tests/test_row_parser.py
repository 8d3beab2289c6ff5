from datetime import date

import pytest

from sheets.modules.row_parser import (
    client_to_debtor,
    invoice_status,
    parse_address,
    parse_client_row,
    parse_contract_row,
    parse_invoice_row,
    parse_items_json,
)

CLIENT_ROW = [
    "C-001",
    "CNT-2024-001",
    '"Anna"',
    " Muster ",
    "anna@example.com",
    "+41 79 000 00 00",
    "Hauptstrasse 5, 2. Stock\n3000 Bern\nBE, Switzerland",
    "Website",
    "German",
    "2024-01-10",
]


def test_parse_full_address():
    address = parse_address("Bahnhofstrasse 12A, Apt 3\n8001 Zürich\nZH, Switzerland")

    assert address.street == "Bahnhofstrasse"
    assert address.building == "12A"
    assert address.apartment == "Apt 3"
    assert address.zip == "8001"
    assert address.city == "Zürich"
    assert address.state == "ZH"
    assert address.country == "Switzerland"


def test_parse_partial_address():
    address = parse_address("Dorfplatz\n6300 Zug am See")

    assert address.street == "Dorfplatz"
    assert address.building == ""
    assert address.city == "Zug am See"
    assert address.country == ""
    assert parse_address("").street == ""


def test_client_row(today):
    client = parse_client_row(CLIENT_ROW, 0, today)

    assert client.id == "C-001"
    assert client.full_name == "Anna Muster"
    assert client.street == "Hauptstrasse"
    assert client.building == "5"
    assert client.apartment == "2. Stock"
    assert client.city == "Bern"
    assert client.country == "Switzerland"
    assert client.company_name == ""
    assert client.created_at == "2024-01-10"

    data = client.as_json()
    assert data["fullName"] == "Anna Muster"
    assert data["clientNo"] == "C-001"


def test_short_client_row_gets_defaults(today):
    client = parse_client_row(["", "", "Ben"], 3, today)

    assert client.id == "client-3"
    assert client.full_name == "Ben"
    assert client.language == "English"
    assert client.created_at == "2024-03-01"


def test_contract_row_links_client(today):
    clients = {"C-001": parse_client_row(CLIENT_ROW, 0, today)}
    row = ["CNT-2024-001", "C-001", "2024-01-10", "", "2024-01-15", "2024-06-30", "", "20", "1485.50", "", "10"]
    contract = parse_contract_row(row, 0, clients, today)

    assert contract.client_name == "Anna Muster"
    assert contract.program == "Private tuition"
    assert contract.total_hours == 20.0
    assert contract.total_amount == 1485.5
    assert contract.discount == 10.0
    assert contract.status == "active"
    assert contract.as_json()["contractNumber"] == "CNT-2024-001"


def test_contract_without_known_client(today):
    contract = parse_contract_row(["", "C-999"], 2, {}, today)
    assert contract.id == "contract-2"
    assert contract.client_name == ""
    assert contract.total_amount == 0.0


@pytest.mark.parametrize(
    "status, due, expected",
    [
        ("Paid", "2020-01-01", "paid"),
        ("unpaid", "2024-02-29", "overdue"),
        ("", "2024-03-01", "unpaid"),
        ("unpaid", "2024-04-30", "unpaid"),
        ("unpaid", "", "unpaid"),
        ("open", "irgendwann", "unpaid"),
    ],
)
def test_invoice_status(status, due, expected):
    assert invoice_status(status, due, date(2024, 3, 1)) == expected


def test_items_json_is_parsed_leniently():
    items = parse_items_json('[{"name": "Kurs", "quantity": 2, "unitPrice": 75}, {"description": "Buch"}, "x"]')

    assert [item.description for item in items] == ["Kurs", "Buch"]
    assert items[0].rate == 75.0
    assert items[1].quantity == 1.0
    assert parse_items_json("{kaputt") == []
    assert parse_items_json('{"name": "kein Array"}') == []


def test_invoice_row(today):
    row = [
        "2024/IN/001", "CNT-2024-001", "Anna Muster", "anna@example.com", "1485", "", "English",
        "2024-02-15", "2024-02-29", "unpaid", "https://drive/x", "", '[{"name": "Kurs", "quantity": 20, "unitPrice": 75}]',
        "10",
    ]
    invoice = parse_invoice_row(row, 0, today)

    assert invoice.id == "2024/IN/001"
    assert invoice.amount == 1485.0
    assert invoice.currency == "CHF"
    assert invoice.language == "EN"
    assert invoice.status == "overdue"
    assert invoice.items[0].quantity == 20.0
    assert invoice.discount == 10.0
    assert invoice.created_at == "2024-02-15"
    assert invoice.as_json()["pdfLink"] == "https://drive/x"


def test_client_to_debtor(today):
    debtor = client_to_debtor(parse_client_row(CLIENT_ROW, 0, today))

    assert debtor.name == "Anna Muster"
    assert debtor.email == "anna@example.com"
    assert debtor.address_line == "Hauptstrasse 5, 2. Stock"
    assert debtor.zip_city == "3000 Bern"
    assert debtor.key == "C-001"
