from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .utils import safe_str  # Nutze zentrale Hilfsfunktion für String-Konvertierung


class Entity(BaseModel):
    """
    Basisklasse für Rechnungsempfänger und Rechnungssteller.
    Die Adresse wird strukturiert gehalten (Strasse, Hausnummer, Wohnung, PLZ, Ort, Land),
    so wie sie der QR-Zahlteil mit Adresstyp "S" verlangt.
    Alle Felder werden beim Initialisieren auf str gecastet, um Typfehler durch z.B. numerische PLZ zu vermeiden.
    """
    model_config = ConfigDict(frozen=True)

    name: str = ""
    street: str = ""
    building: str = ""
    apartment: str = ""
    zip: str = ""
    city: str = ""
    country: str = ""
    key: str = ""

    @model_validator(mode="before")
    def ensure_str_fields(cls, data):
        """
        Sorgt dafür, dass alle string-Felder wirklich als str vorliegen.
        Das verhindert Validierungsfehler, wenn z.B. PLZ als int aus einer Datenquelle kommt.
        """
        if isinstance(data, dict):
            data = dict(data)
            for field in ["name", "street", "building", "apartment", "zip", "city", "country", "key"]:
                if field in data:
                    data[field] = safe_str(data[field]).strip()
        return data

    @property
    def address_line(self) -> str:
        """
        Strasse und Hausnummer, Wohnung durch Komma abgetrennt ("Main Street 123, Apt 4B").
        """
        street = " ".join(part for part in [self.street, self.building] if part)
        return ", ".join(part for part in [street, self.apartment] if part)

    @property
    def zip_city(self) -> str:
        return f"{self.zip} {self.city}".strip()


class Debtor(Entity):
    """
    Rechnungsempfänger (Zahlungspflichtiger im QR-Zahlteil).
    """
    email: str = ""

    @field_validator("email", mode="before")
    def email_as_str(cls, v) -> str:
        return safe_str(v).strip()


class Creditor(Entity):
    """
    Rechnungssteller inkl. Bankverbindung.
    """
    iban: Optional[str] = None
    swift: str = ""
    bank_name: str = ""
    email: str = ""
    phone: str = ""
    website: str = ""

    @model_validator(mode="before")
    def ensure_iban_str(cls, data):
        """
        Sorgt dafür, dass IBAN immer ein String oder None ist.
        """
        if isinstance(data, dict) and data.get("iban") is not None:
            data = dict(data)
            data["iban"] = safe_str(data["iban"]).strip() or None
        return data

    @property
    def compact_iban(self) -> str:
        """
        IBAN ohne Leerzeichen, wie sie im QR-Code stehen muss.
        """
        return safe_str(self.iban).replace(" ", "").upper()
