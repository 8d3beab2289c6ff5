from typing import Optional
from pydantic import BaseModel

class FormattingConfig(BaseModel):
    locale_en: Optional[str] = "en_CH"
    locale_de: Optional[str] = "de_CH"
    date_format: Optional[str] = "dd.MM.yyyy"
