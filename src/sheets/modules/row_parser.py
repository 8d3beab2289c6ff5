"""
Umwandlung der Tabellenzeilen (Client_Info, Contract_Details, Invoices) in Datensätze.

Spaltenbelegung Client_Info:
    A Client No, B Contract ID, C First Name, D Last Name, E Email, F Phone,
    G Address, H Source, I Language, J Date, K Company Name, L Company Address

Spaltenbelegung Contract_Details:
    A Contract No, B Client No, C Contract Date, D Program, E Start Date,
    F Valid Until, G Course End Date, H Total Hours, I Total Value,
    J Full Payment Schedule, K Discounts, L Lesson Packages

Spaltenbelegung Invoices:
    A Invoice Number, B Contract ID, C Client Name, D Client Email, E Amount,
    F Currency, G Language, H Issue Date, I Due Date, J Status, K PDF Link,
    L Items (Text), M Items JSON, N Discount, O Installments (Text),
    P Installments JSON, Q Extra Notes, R Created At
"""
import json
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict

from invoices.modules.qr_payload import split_street_and_number
from pydantic_models.data.sheet_records import (
    ClientRecord,
    ContractRecord,
    InvoiceRecord,
    InvoiceRecordItem,
    InvoiceStatus,
)
from shared_modules.entity import Debtor
from shared_modules.utils import safe_str, to_date, to_decimal


class ParsedAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    street: str = ""
    building: str = ""
    apartment: str = ""
    zip: str = ""
    city: str = ""
    state: str = ""
    country: str = ""


def _cell(row: Sequence[Any], index: int) -> str:
    """Zellwert als getrimmter String; fehlende Zellen am Zeilenende sind leer."""
    return safe_str(row[index]).strip() if index < len(row) else ""


def _unquote(value: str) -> str:
    return value.strip().strip('"')


def _number(value: str) -> float:
    return float(to_decimal(value, None) or 0)


def parse_address(text: str) -> ParsedAddress:
    """
    Zerlegt eine mehrzeilige Adresse im Format
    "Strasse Nr, Wohnung\\nPLZ Ort\\nKanton, Land".
    Fehlende Zeilen ergeben leere Felder.
    """
    lines = safe_str(text).split("\n")
    street_line = lines[0] if len(lines) > 0 else ""
    zip_city_line = lines[1].strip() if len(lines) > 1 else ""
    state_country_line = lines[2] if len(lines) > 2 else ""

    street_and_building, _, apartment = street_line.partition(",")
    street, building = split_street_and_number(street_and_building)

    zip_code, _, city = zip_city_line.partition(" ")
    state, _, country = state_country_line.partition(",")
    return ParsedAddress(
        street=street,
        building=building,
        apartment=apartment.strip(),
        zip=zip_code.strip(),
        city=city.strip(),
        state=state.strip(),
        country=country.strip(),
    )


def parse_client_row(row: Sequence[Any], index: int, today: Optional[date] = None) -> ClientRecord:
    client_no = _cell(row, 0)
    first_name = _unquote(_cell(row, 2))
    last_name = _unquote(_cell(row, 3))
    address = _cell(row, 6)
    parsed = parse_address(address)
    row_date = _cell(row, 9)
    return ClientRecord(
        id=client_no or f"client-{index}",
        client_no=client_no,
        contract_id=_cell(row, 1),
        first_name=first_name,
        last_name=last_name,
        full_name=f"{first_name} {last_name}".strip(),
        email=_cell(row, 4),
        phone=_cell(row, 5),
        address=address,
        **parsed.model_dump(),
        source=_cell(row, 7),
        language=_cell(row, 8) or "English",
        date=row_date,
        company_name=_cell(row, 10),
        company_address=_cell(row, 11),
        created_at=row_date or (today or date.today()).isoformat(),
    )


def parse_contract_row(
    row: Sequence[Any],
    index: int,
    clients: Optional[Dict[str, ClientRecord]] = None,
    today: Optional[date] = None,
) -> ContractRecord:
    """
    Vertrag aus Contract_Details; der Klientenname kommt über die Client No aus Client_Info.
    """
    contract_no = _cell(row, 0)
    client_no = _cell(row, 1)
    contract_date = _cell(row, 2)
    client = (clients or {}).get(client_no)
    return ContractRecord(
        id=contract_no or f"contract-{index}",
        contract_number=contract_no,
        contract_date=contract_date,
        client_no=client_no,
        client_name=client.full_name if client else "",
        program=_cell(row, 3) or "Private tuition",
        start_date=_cell(row, 4),
        valid_until=_cell(row, 5),
        course_end_date=_cell(row, 6),
        total_hours=_number(_cell(row, 7)),
        total_amount=_number(_cell(row, 8)),
        payment_schedule=_cell(row, 9),
        discount=_number(_cell(row, 10)),
        lesson_packages=_cell(row, 11),
        created_at=contract_date or (today or date.today()).isoformat(),
    )


def invoice_status(status: str, due_date: str, today: Optional[date] = None) -> InvoiceStatus:
    """
    "paid" bleibt bezahlt; sonst überfällig, wenn das Fälligkeitsdatum vor heute liegt.
    """
    if (status or "unpaid").strip().lower() == "paid":
        return "paid"
    due = to_date(due_date)
    if due is not None and due < (today or date.today()):
        return "overdue"
    return "unpaid"


def parse_items_json(text: str) -> List[InvoiceRecordItem]:
    """
    Positionen aus der JSON-Spalte. Ungültiges JSON ergibt eine leere Liste.
    """
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Positionen nicht lesbar: {e}")
        return []
    if not isinstance(parsed, list):
        return []
    items = []
    for raw in parsed:
        if not isinstance(raw, dict):
            continue
        items.append(
            InvoiceRecordItem(
                description=safe_str(raw.get("name") or raw.get("description")),
                quantity=float(to_decimal(raw.get("quantity"), None) or 1),
                rate=float(to_decimal(raw.get("unitPrice") or raw.get("rate"), None) or 0),
            )
        )
    return items


def parse_invoice_row(row: Sequence[Any], index: int, today: Optional[date] = None) -> InvoiceRecord:
    invoice_number = _cell(row, 0)
    language = _cell(row, 6)
    issue_date = _cell(row, 7)
    due_date = _cell(row, 8)
    return InvoiceRecord(
        id=invoice_number or f"invoice-{index}",
        invoice_number=invoice_number,
        contract_id=_cell(row, 1),
        client_name=_cell(row, 2),
        client_email=_cell(row, 3),
        amount=_number(_cell(row, 4)),
        currency=_cell(row, 5) or "CHF",
        language="EN" if language in ("English", "EN") else "DE",
        issue_date=issue_date,
        due_date=due_date,
        status=invoice_status(_cell(row, 9), due_date, today),
        pdf_link=_cell(row, 10),
        items=parse_items_json(_cell(row, 12)),
        discount=_number(_cell(row, 13)),
        extra_notes=_cell(row, 16),
        created_at=_cell(row, 17) or issue_date or (today or date.today()).isoformat(),
    )


def client_to_debtor(client: ClientRecord) -> Debtor:
    """
    Rechnungsempfänger aus einem Klientendatensatz (Vorbelegung im Rechnungsformular).
    """
    return Debtor(
        name=client.full_name or client.company_name,
        email=client.email,
        street=client.street,
        building=client.building,
        apartment=client.apartment,
        zip=client.zip,
        city=client.city,
        country=client.country,
        key=client.client_no,
    )
