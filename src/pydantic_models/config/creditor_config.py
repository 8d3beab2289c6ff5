from typing import Optional
from pydantic import BaseModel

class CreditorConfig(BaseModel):
    """
    Rechnungssteller (Zahlungsempfänger im QR-Zahlteil).
    Die Defaultwerte sind gleichzeitig der Fallback, falls im QR-Zahlteil
    IBAN oder Pflichtangaben fehlen.
    """
    name: Optional[str] = "Sprachschule Zürich"
    street: Optional[str] = "Bahnhofstrasse"
    building: Optional[str] = "1"
    zip_code: Optional[str] = "8001"
    city: Optional[str] = "Zürich"
    country: Optional[str] = "CH"
    phone: Optional[str] = "+41 44 000 00 00"
    email: Optional[str] = "info@sprachschule.ch"
    website: Optional[str] = "www.sprachschule.ch"
    bank: Optional[str] = "Zürcher Kantonalbank"
    swift: Optional[str] = "ZKBKCHZZ80A"
    iban: Optional[str] = "CH93 0076 2011 6238 5295 7"
