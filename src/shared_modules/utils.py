import re
from contextlib import contextmanager
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional

from loguru import logger

TWO_PLACES = Decimal("0.01")


def safe_str(val) -> str:
    """
    Gibt immer einen String zurück, auch wenn val None oder numerisch ist.
    """
    return "" if val is None else str(val)


@contextmanager
def log_exceptions(msg: str, continue_on_error: bool = True) -> Generator[None, None, None]:
    """
    Context-Manager für das Logging von Ausnahmen.
    Loggt eine Fehlermeldung und entscheidet, ob die Exception weitergereicht wird.

    Args:
        msg (str): Nachricht für das Logging im Fehlerfall.
        continue_on_error (bool): Bei False wird die Exception erneut ausgelöst, ansonsten nur geloggt.

    Beispiel:
        with log_exceptions("Fehler beim Verarbeiten der Datei"):
            do_something()
    """
    try:
        yield
    except Exception as e:
        logger.error(f"{msg}: {e}")
        if not continue_on_error:
            raise


# Datumsformate für freie Texteingaben
DATE_FORMATS: tuple[str, ...] = ("%Y-%m-%d", "%d.%m.%Y", "%Y/%m/%d", "%d/%m/%Y")

def _parse_decimal_str(s: str) -> Optional[Decimal]:
    s = s.strip().replace("’", "").replace("'", "").replace(" ", "").replace(",", ".")
    if not s:
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None

def _parse_date_str(s: str) -> Optional[date]:
    s = s.strip()
    # ISO-Zeitstempel (z. B. aus JavaScript) auf das Datum kürzen
    if "T" in s:
        s = s.split("T", 1)[0]
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None

_DECIMAL_CONVERTERS: Dict[type, Callable[[Any], Optional[Decimal]]] = {
    type(None): lambda _v: None,
    bool: lambda _v: None,
    int: lambda v: Decimal(v),
    float: lambda v: Decimal(str(v)),
    Decimal: lambda v: v,
    str: _parse_decimal_str,
}

_DATE_CONVERTERS: Dict[type, Callable[[Any], Optional[date]]] = {
    datetime: lambda v: v.date(),
    date: lambda v: v,
    str: _parse_date_str,
    type(None): lambda _v: None,
}

def to_decimal(v: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Typbasierte Zahl-Konvertierung (None/str/int/float -> Decimal|default)."""
    conv = _DECIMAL_CONVERTERS.get(type(v))
    result = conv(v) if conv else None
    if result is None or not result.is_finite():
        return default
    return result

def to_date(v: Any) -> Optional[date]:
    """Typbasierte Datums-Konvertierung (None/str/date/datetime -> date|None)."""
    conv = _DATE_CONVERTERS.get(type(v))
    return conv(v) if conv else None

def format_amount(value: Decimal) -> str:
    """Betrag mit genau zwei Nachkommastellen, ohne Tausendertrennzeichen (z. B. 1485.00)."""
    return f"{Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP):.2f}"

def ensure_dir(path: Path) -> Path:
    """Erzeugt ein Verzeichnis (rekursiv), falls es fehlt, und gibt den Pfad zurück."""
    path.mkdir(parents=True, exist_ok=True)
    return path

_UNSAFE_FILENAME_RE = re.compile(r"[\\/:*?\"<>|\s]+")

def safe_filename(name: str, fallback: str = "unbekannt") -> str:
    """Ersetzt Pfadtrenner und Sonderzeichen, z. B. '2024/IN/001' -> '2024-IN-001'."""
    cleaned = _UNSAFE_FILENAME_RE.sub("-", safe_str(name)).strip("-.")
    return cleaned or fallback
