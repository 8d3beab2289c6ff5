"""
Nutzdaten (SPC-Text) für den QR-Code des Schweizer Zahlteils.

Der Text besteht aus 31 Feldern in fester Reihenfolge, getrennt durch CRLF:

     1  QRType           SPC
     2  Version          0200
     3  Coding           1
     4  IBAN             ohne Leerzeichen
     5  Adresstyp        S (strukturiert)
     6-11 Zahlungsempfänger: Name, Strasse, Hausnummer, PLZ, Ort, Land
    12-17 Endgültiger Zahlungsempfänger (leer)
    18  Betrag           zwei Nachkommastellen
    19  Währung          CHF
    20  Adresstyp        S
    21-26 Zahlungspflichtiger: Name, Strasse, Hausnummer, PLZ, Ort, Land
    27  Referenztyp      NON
    28  Referenz         (leer)
    29  Mitteilung       "Invoice {Nr} - Contract {Vertrag}"
    30  Trailer          EPD
    31  Alternatives Verfahren
"""
import re
from typing import List, Optional, Tuple

from loguru import logger

from pydantic_models.config.creditor_config import CreditorConfig
from pydantic_models.data.invoice_data import InvoiceData
from shared_modules.entity import Creditor
from shared_modules.utils import format_amount, safe_str

QR_TYPE = "SPC"
QR_VERSION = "0200"
QR_CODING = "1"
ADDRESS_TYPE_STRUCTURED = "S"
CURRENCY = "CHF"
REFERENCE_TYPE_NONE = "NON"
TRAILER = "EPD"
ALTERNATIVE_PROCEDURE = "eBill/B2B"
DEFAULT_COUNTRY = "CH"

FIELD_SEPARATOR = "\r\n"
FIELD_COUNT = 31
ULTIMATE_CREDITOR_FIELDS = 6

# Maximallängen laut Swiss Payment Standards
MAX_NAME = 70
MAX_STREET = 70
MAX_BUILDING = 16
MAX_ZIP = 16
MAX_CITY = 35
MAX_MESSAGE = 140

# Strasse + abschliessende Hausnummer ("Bahnhofstrasse 12A")
_STREET_NUMBER_RE = re.compile(r"^(?P<street>.+?)\s+(?P<number>\d+[A-Za-z]*)$")
_LINE_BREAK_RE = re.compile(r"[\r\n]+")

_COUNTRY_CODES = {
    "switzerland": "CH",
    "schweiz": "CH",
    "suisse": "CH",
    "svizzera": "CH",
    "germany": "DE",
    "deutschland": "DE",
    "austria": "AT",
    "österreich": "AT",
    "oesterreich": "AT",
    "france": "FR",
    "frankreich": "FR",
    "italy": "IT",
    "italien": "IT",
    "liechtenstein": "LI",
}


def split_street_and_number(address_line: str) -> Tuple[str, str]:
    """
    Trennt eine freie Adresszeile in Strasse und Hausnummer.

    "Bahnhofstrasse 12A" -> ("Bahnhofstrasse", "12A").
    Ohne erkennbare Hausnummer wird die ganze Zeile als Strasse verwendet.
    """
    line = safe_str(address_line).strip()
    match = _STREET_NUMBER_RE.match(line)
    if not match:
        return line, ""
    return match.group("street").strip(), match.group("number")


def country_code(value: Optional[str], default: str = DEFAULT_COUNTRY) -> str:
    """
    Liefert den zweistelligen ISO-Code für ein Land ("Switzerland" -> "CH").
    Leere oder unbekannte Angaben ergeben den Default, da das QR-Feld nur
    ISO-Codes zulässt. Die Rechnungsseite zeigt weiterhin den Freitext.
    """
    text = safe_str(value).strip()
    if not text:
        return default
    if len(text) == 2 and text.isalpha():
        return text.upper()
    code = _COUNTRY_CODES.get(text.lower())
    if code is None:
        logger.warning(f"Kein ISO-Ländercode für '{text}' bekannt, nutze {default}.")
        return default
    return code


def _clean(value: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Feldwert ohne Zeilenumbrüche, auf die zulässige Länge gekürzt.
    """
    text = _LINE_BREAK_RE.sub(" ", safe_str(value)).strip()
    if max_length is not None and len(text) > max_length:
        logger.debug(f"Feld '{text[:20]}…' auf {max_length} Zeichen gekürzt.")
        text = text[:max_length]
    return text


def _creditor_from_config(cfg: CreditorConfig) -> Creditor:
    return Creditor(
        name=safe_str(cfg.name),
        street=safe_str(cfg.street),
        building=safe_str(cfg.building),
        zip=safe_str(cfg.zip_code),
        city=safe_str(cfg.city),
        country=safe_str(cfg.country),
        iban=cfg.iban,
        swift=safe_str(cfg.swift),
        bank_name=safe_str(cfg.bank),
        email=safe_str(cfg.email),
        phone=safe_str(cfg.phone),
        website=safe_str(cfg.website),
    )


def resolve_creditor(
    invoice: InvoiceData,
    creditor_config: Optional[CreditorConfig] = None,
    fallback_config: Optional[CreditorConfig] = None,
) -> Creditor:
    """
    Bestimmt den Zahlungsempfänger für Rechnung und Zahlteil.

    Reihenfolge: Bankangaben der Rechnung, dann konfigurierter Rechnungssteller.
    Fehlen IBAN oder Pflichtangaben (Name, PLZ, Ort), wird der Fallback
    (Defaultwerte von CreditorConfig) eingesetzt. Die Rechnungserstellung wird
    wegen fehlender Zahlungsdaten nie abgebrochen.
    """
    configured = creditor_config or CreditorConfig()
    fallback = _creditor_from_config(fallback_config or CreditorConfig())
    creditor = _creditor_from_config(configured)

    if not (creditor.name and creditor.zip and creditor.city):
        logger.warning("Rechnungssteller unvollständig konfiguriert, nutze Fallback-Adresse.")
        creditor = creditor.model_copy(
            update={
                "name": creditor.name or fallback.name,
                "street": creditor.street or fallback.street,
                "building": creditor.building if creditor.street else fallback.building,
                "zip": creditor.zip or fallback.zip,
                "city": creditor.city or fallback.city,
                "country": creditor.country or fallback.country,
            }
        )

    bank = invoice.bank
    if bank is not None:
        creditor = creditor.model_copy(
            update={
                "iban": bank.iban or creditor.iban,
                "swift": bank.swift or creditor.swift,
                "bank_name": bank.name or creditor.bank_name,
            }
        )

    if not creditor.compact_iban:
        logger.warning(f"Keine IBAN für Rechnung {invoice.invoice_number}, nutze Fallback-IBAN.")
        creditor = creditor.model_copy(update={"iban": fallback.iban})
    return creditor


def build_message(invoice: InvoiceData) -> str:
    """
    Unstrukturierte Mitteilung: "Invoice {Nr}" bzw. "Invoice {Nr} - Contract {Vertrag}".
    """
    message = f"Invoice {invoice.invoice_number}"
    if invoice.contract_number:
        message += f" - Contract {invoice.contract_number}"
    return message


def build_qr_fields(invoice: InvoiceData, creditor: Creditor) -> List[str]:
    """
    Die 31 Felder des SPC-Textes in der vorgeschriebenen Reihenfolge.
    """
    creditor_street, creditor_number = creditor.street, creditor.building
    if not creditor_number:
        creditor_street, creditor_number = split_street_and_number(creditor.street)

    debtor = invoice.debtor
    debtor_street, debtor_number = split_street_and_number(debtor.street)
    if debtor.building:
        debtor_street, debtor_number = debtor.street, debtor.building

    fields = [
        QR_TYPE,
        QR_VERSION,
        QR_CODING,
        _clean(creditor.compact_iban),
        ADDRESS_TYPE_STRUCTURED,
        _clean(creditor.name, MAX_NAME),
        _clean(creditor_street, MAX_STREET),
        _clean(creditor_number, MAX_BUILDING),
        _clean(creditor.zip, MAX_ZIP),
        _clean(creditor.city, MAX_CITY),
        _clean(country_code(creditor.country, DEFAULT_COUNTRY)),
    ]
    fields += [""] * ULTIMATE_CREDITOR_FIELDS
    fields += [
        format_amount(invoice.total),
        CURRENCY,
        ADDRESS_TYPE_STRUCTURED,
        _clean(debtor.name, MAX_NAME),
        _clean(debtor_street, MAX_STREET),
        _clean(debtor_number, MAX_BUILDING),
        _clean(debtor.zip, MAX_ZIP),
        _clean(debtor.city, MAX_CITY),
        _clean(country_code(debtor.country, DEFAULT_COUNTRY)),
        REFERENCE_TYPE_NONE,
        "",
        _clean(build_message(invoice), MAX_MESSAGE),
        TRAILER,
        ALTERNATIVE_PROCEDURE,
    ]
    if len(fields) != FIELD_COUNT:
        raise ValueError(f"SPC-Text hat {len(fields)} statt {FIELD_COUNT} Felder")
    return fields


def build_qr_payload(invoice: InvoiceData, creditor: Creditor) -> str:
    """
    Erzeugt den SPC-Text für den QR-Code (Felder mit CRLF verbunden).
    Gleiche Eingabe ergibt byte-identische Ausgabe.
    """
    payload = FIELD_SEPARATOR.join(build_qr_fields(invoice, creditor))
    logger.debug(f"QR-Nutzdaten für Rechnung {invoice.invoice_number} erzeugt ({len(payload)} Zeichen).")
    return payload
