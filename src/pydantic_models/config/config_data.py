from pydantic import BaseModel, Field

from .creditor_config import CreditorConfig
from .formatting_config import FormattingConfig
from .logging_config import LoggingConfig
from .qr_bill_config import QrBillConfig
from .sheets_config import SheetsConfig
from .structure_config import StructureConfig
from .webhook_config import WebhookConfig


class ConfigData(BaseModel):
    """
    Modell für die gesamte Konfiguration des Projekts.
    Das sind die Sektionen in der Config-Datei. Fehlende Sektionen
    werden mit den Defaultwerten der jeweiligen Modelle belegt.
    """
    structure: StructureConfig = Field(default_factory=StructureConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    formatting: FormattingConfig = Field(default_factory=FormattingConfig)
    creditor: CreditorConfig = Field(default_factory=CreditorConfig)
    qr_bill: QrBillConfig = Field(default_factory=QrBillConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
