from io import BytesIO
from typing import Optional

import qrcode
from loguru import logger
from PIL import Image
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

from pydantic_models.config.qr_bill_config import QrBillConfig

MM_PER_INCH = 25.4

# Reihenfolge nach Korrekturstärke; unterhalb von M ist der Zahlteil nicht zulässig
_LEVELS = {
    "L": (0, ERROR_CORRECT_L),
    "M": (1, ERROR_CORRECT_M),
    "Q": (2, ERROR_CORRECT_Q),
    "H": (3, ERROR_CORRECT_H),
}
MINIMUM_LEVEL = "M"


def qr_size_px(size_mm: float = 46.0, dpi: int = 300) -> int:
    """
    Seitenlänge in Pixeln für eine physische Grösse bei gegebener Auflösung
    (46 mm bei 300 dpi -> 543 px).
    """
    return int(size_mm / MM_PER_INCH * dpi)


def effective_level(level: str) -> str:
    """
    Hebt zu schwache Fehlerkorrektur auf M an, stärkere Stufen bleiben erhalten.
    """
    level = (level or MINIMUM_LEVEL).upper()
    if level not in _LEVELS:
        raise ValueError(f"Unbekannte Fehlerkorrektur-Stufe: {level}")
    if _LEVELS[level][0] < _LEVELS[MINIMUM_LEVEL][0]:
        logger.warning(f"Fehlerkorrektur '{level}' ist für den Zahlteil zu schwach, nutze '{MINIMUM_LEVEL}'.")
        return MINIMUM_LEVEL
    return level


class QrRenderer:
    """
    Kodiert den SPC-Text als quadratisches PNG ohne Rand.
    Abstände zum Zahlteil legt das Layout fest, nicht der Encoder.
    """

    def __init__(self, error_correction: str = MINIMUM_LEVEL, size_mm: float = 46.0, dpi: int = 300):
        self.level: str = effective_level(error_correction)
        self.dpi: int = dpi
        self.size_px: int = qr_size_px(size_mm, dpi)

    @classmethod
    def from_config(cls, qr_config: QrBillConfig) -> "QrRenderer":
        return cls(
            error_correction=qr_config.error_correction,
            size_mm=qr_config.qr_size_mm,
            dpi=qr_config.dpi,
        )

    def encode(self, payload: str) -> Image.Image:
        """
        Erzeugt das QR-Bild in exakt size_px × size_px. Fehler werden weitergereicht.
        """
        qr = qrcode.QRCode(
            version=None,
            error_correction=_LEVELS[self.level][1],
            box_size=10,
            border=0,
        )
        qr.add_data(payload.encode("utf-8"))
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
        return img.resize((self.size_px, self.size_px), Image.NEAREST)

    def render(self, payload: str) -> Optional[bytes]:
        """
        PNG-Bytes des QR-Codes oder None, wenn die Kodierung scheitert.
        Ein fehlerhafter QR-Code darf die Rechnung nie verhindern.
        """
        try:
            img = self.encode(payload)
            buf = BytesIO()
            img.save(buf, format="PNG", dpi=(self.dpi, self.dpi))
            return buf.getvalue()
        except Exception as e:
            logger.error(f"QR-Code konnte nicht erzeugt werden: {e}")
            return None

