from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared_modules.entity import Debtor
from shared_modules.utils import safe_str, to_decimal


class Language(str, Enum):
    EN = "EN"
    DE = "DE"


class InvoiceItem(BaseModel):
    """
    Einzelne Rechnungsposition. Der Positionsbetrag wird nie gespeichert,
    sondern bei Bedarf aus Menge × Einzelpreis berechnet.
    """
    model_config = ConfigDict(frozen=True)

    description: str = ""
    quantity: Decimal = Decimal("0")
    unit: str = "hrs"
    unit_price: Decimal = Decimal("0")

    @field_validator("quantity", "unit_price", mode="before")
    def numbers_or_zero(cls, v) -> Decimal:
        """
        Nicht interpretierbare Zahlen werden zu 0 (wie im Formular).
        """
        return to_decimal(v, Decimal("0"))

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


class Installment(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str = ""
    amount: Decimal = Decimal("0")

    @field_validator("amount", mode="before")
    def amount_or_zero(cls, v) -> Decimal:
        return to_decimal(v, Decimal("0"))

    @field_validator("date", mode="before")
    def date_as_str(cls, v) -> str:
        return safe_str(v)


class BankDetails(BaseModel):
    """
    Abweichende Bankverbindung für eine einzelne Rechnung.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ""
    swift: str = ""
    iban: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.name or self.swift or self.iban)


class InvoiceData(BaseModel):
    """
    Fachliches Datenmodell einer Rechnung, so wie sie gerendert wird.

    Zwischensumme und Total sind keine Felder, sondern werden bei jedem Zugriff
    aus den Positionen und dem Rabatt neu berechnet:
        subtotal = Σ quantity × unit_price
        total    = subtotal × (1 − discount / 100)
    Gerundet wird erst bei der Formatierung.
    """
    model_config = ConfigDict(frozen=True)

    language: Language = Language.DE
    invoice_number: str
    contract_number: Optional[str] = None
    issue_date: str = ""
    due_date: str = ""
    debtor: Debtor = Field(default_factory=Debtor)
    items: List[InvoiceItem] = Field(default_factory=list)
    discount: Decimal = Decimal("0")
    note: Optional[str] = None
    installments: List[Installment] = Field(default_factory=list)
    bank: Optional[BankDetails] = None

    @field_validator("discount", mode="before")
    def discount_in_percent(cls, v) -> Decimal:
        """
        Rabatt in Prozent, begrenzt auf 0..100.
        """
        value = to_decimal(v, Decimal("0"))
        return min(max(value, Decimal("0")), Decimal("100"))

    @field_validator("contract_number", "note", mode="before")
    def blank_to_none(cls, v) -> Optional[str]:
        """
        Leere optionale Texte werden zu None, damit das Layout sie weglässt.
        """
        text = safe_str(v).strip()
        return text or None

    @field_validator("bank", mode="after")
    def empty_bank_to_none(cls, v: Optional[BankDetails]) -> Optional[BankDetails]:
        return None if v is None or v.is_empty else v

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0"))

    @property
    def discount_amount(self) -> Decimal:
        return self.subtotal * self.discount / Decimal("100")

    @property
    def total(self) -> Decimal:
        return self.subtotal * (Decimal("1") - self.discount / Decimal("100"))

    @property
    def has_installments(self) -> bool:
        return len(self.installments) > 0
