from typing import List, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

InvoiceStatus = Literal["paid", "unpaid", "overdue"]


class SheetRecord(BaseModel):
    """
    Basis für Datensätze aus der Stammdaten-Tabelle.
    Ausgabe als JSON in camelCase (wie vom Rechnungsformular erwartet).
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def as_json(self) -> dict:
        return self.model_dump(by_alias=True)


class ClientRecord(SheetRecord):
    id: str
    client_no: str = ""
    contract_id: str = ""
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    street: str = ""
    building: str = ""
    apartment: str = ""
    zip: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    source: str = ""
    language: str = "English"
    date: str = ""
    company_name: str = ""
    company_address: str = ""
    created_at: str = ""


class ContractRecord(SheetRecord):
    id: str
    contract_number: str = ""
    contract_date: str = ""
    client_no: str = ""
    client_name: str = ""
    program: str = "Private tuition"
    start_date: str = ""
    valid_until: str = ""
    course_end_date: str = ""
    total_hours: float = 0.0
    total_amount: float = 0.0
    discount: float = 0.0
    payment_schedule: str = ""
    lesson_packages: str = ""
    status: str = "active"
    created_at: str = ""


class InvoiceRecordItem(SheetRecord):
    description: str = ""
    quantity: float = 1.0
    rate: float = 0.0


class InvoiceRecord(SheetRecord):
    id: str
    invoice_number: str = ""
    contract_id: str = ""
    client_name: str = ""
    client_email: str = ""
    amount: float = 0.0
    currency: str = "CHF"
    language: Literal["EN", "DE"] = "DE"
    issue_date: str = ""
    due_date: str = ""
    status: InvoiceStatus = "unpaid"
    pdf_link: str = ""
    items: List[InvoiceRecordItem] = []
    discount: float = 0.0
    extra_notes: str = ""
    created_at: str = ""
