from pydantic import BaseModel, field_validator

class QrBillConfig(BaseModel):
    """
    Einstellungen für den QR-Code im Zahlteil.
    """
    error_correction: str = "M"
    dpi: int = 300
    qr_size_mm: float = 46.0

    @field_validator("error_correction", mode="before")
    def upper_level(cls, v) -> str:
        """
        Fehlerkorrektur-Stufe immer als Grossbuchstabe (L, M, Q, H).
        """
        return str(v or "M").strip().upper()
