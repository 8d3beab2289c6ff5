import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from cryptography.fernet import Fernet, InvalidToken
from loguru import logger

from pydantic_models.config.config_data import ConfigData
from pydantic_models.config.creditor_config import CreditorConfig
from pydantic_models.config.formatting_config import FormattingConfig
from pydantic_models.config.logging_config import LoggingConfig
from pydantic_models.config.qr_bill_config import QrBillConfig
from pydantic_models.config.sheets_config import SheetsConfig
from pydantic_models.config.structure_config import StructureConfig
from pydantic_models.config.webhook_config import WebhookConfig

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / ".config" / "invoice_config.yaml"
CONFIG_PATH_ENV = "INVOICE_CONFIG"


class Config:
    """
    Singleton für das Laden und Prüfen der Konfiguration.
    Nutzt statische Pydantic-Modelle für alle Abschnitte.
    Fehlt die Config-Datei, gelten die Defaultwerte der Modelle.
    """

    _instance: Optional["Config"] = None

    def __new__(cls, config_path: Optional[Path] = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None):
        # Ohne neuen Pfad bleibt eine bereits geladene Konfiguration bestehen
        if self._initialized and config_path is None:
            return
        # Fallback-Logger für Fehler beim Laden der Config
        logger.remove()
        logger.add(sys.stderr, level="WARNING")
        self.config_path: Path = Path(
            config_path or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
        )
        try:
            self.raw_config: Dict[str, Any] = self._load_config()
            self.data: ConfigData = ConfigData(**self.raw_config)
        except Exception as e:
            logger.error(f"Fehler beim Laden der Konfiguration: {e}")
            raise

        self.logging: LoggingConfig = self.data.logging
        self._setup_logging()
        logger.debug(f"Lade Konfiguration von {self.config_path}")

        self.structure: StructureConfig = self.data.structure
        self.formatting: FormattingConfig = self.data.formatting
        self.creditor: CreditorConfig = self.data.creditor
        self.qr_bill: QrBillConfig = self.data.qr_bill
        self.sheets: SheetsConfig = self.data.sheets
        self.webhook: WebhookConfig = self.data.webhook

        self._validate_qr_bill()
        logger.debug("Konfiguration erfolgreich geladen und validiert.")
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """
        Verwirft die Singleton-Instanz (z. B. zwischen Tests).
        """
        cls._instance = None

    def _setup_logging(self) -> None:
        """
        Initialisiert loguru mit den Einstellungen aus der Config-Datei.
        """
        logger.remove()
        log_file = self.logging.log_file
        log_level = self.logging.log_level or "INFO"
        if log_file:
            logger.add(
                log_file,
                level=log_level,
                rotation=self.logging.rotation,
                retention=self.logging.retention,
            )
        logger.add(sys.stderr, level=log_level)

    def _load_config(self) -> Dict[str, Any]:
        """
        Lädt die YAML-Konfigurationsdatei. Eine fehlende Datei ergibt eine leere Konfiguration.
        """
        if not self.config_path.exists():
            logger.warning(f"Config-Datei nicht gefunden, nutze Defaults: {self.config_path}")
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _validate_qr_bill(self) -> None:
        """
        Prüft die QR-Einstellungen.
        """
        if self.qr_bill.error_correction not in {"L", "M", "Q", "H"}:
            logger.error(f"Unbekannte Fehlerkorrektur-Stufe '{self.qr_bill.error_correction}'.")
            raise ValueError(
                f"qr_bill.error_correction muss L, M, Q oder H sein, nicht '{self.qr_bill.error_correction}'."
            )
        if self.qr_bill.dpi <= 0:
            raise ValueError("qr_bill.dpi muss positiv sein.")

    def get_secret(self, key: str, default: Any = None) -> Optional[str]:
        """
        Gibt ein Secret (z. B. Passwort, API-Key) aus Umgebungsvariablen zurück.
        """
        logger.debug(f"Lese Secret '{key}' aus Umgebungsvariablen.")
        return os.getenv(key, default)

    def get_decrypted_secret(
        self, key: str, fernet_key_env: str = "FERNET_KEY", default: Any = None
    ) -> Optional[str]:
        """
        Holt ein verschlüsseltes Secret aus der Umgebung und entschlüsselt es mit Fernet.
        """
        encrypted = os.getenv(key)
        fernet_key = os.getenv(fernet_key_env)
        logger.debug(f"Versuche Secret '{key}' mit Fernet-Key '{fernet_key_env}' zu entschlüsseln.")
        if not encrypted or not fernet_key:
            logger.debug("Kein Secret oder Key gefunden, Rückgabe Default.")
            return default
        try:
            f = Fernet(fernet_key.encode())
            decrypted = f.decrypt(encrypted.encode())
            logger.debug("Secret erfolgreich entschlüsselt.")
            return decrypted.decode()
        except (InvalidToken, ValueError) as e:
            logger.error(f"Entschlüsselung fehlgeschlagen: {e}")
            raise RuntimeError(f"Entschlüsselung fehlgeschlagen: {e}") from e

    def get_spreadsheet_id(self) -> Optional[str]:
        """
        Spreadsheet-ID aus der Umgebung (GOOGLE_SHEETS_SPREADSHEET_ID) oder der Config.
        """
        return self.get_secret("GOOGLE_SHEETS_SPREADSHEET_ID") or self.sheets.spreadsheet_id

    def get_sheet_range(self, name: str) -> str:
        """
        Bereich eines Tabellenblatts, z. B. name="clients" -> CLIENTS_SHEET_RANGE oder sheets.clients_range.
        """
        configured = getattr(self.sheets, f"{name}_range")
        return os.getenv(f"{name.upper()}_SHEET_RANGE") or configured

    def get_webhook_url(self) -> Optional[str]:
        """
        Webhook-URL des Workflow-Systems (N8N_WEBHOOK_URL oder webhook.url).
        """
        return self.get_secret("N8N_WEBHOOK_URL") or self.webhook.url

    def get_output_dir(self) -> Path:
        """
        Ausgabeverzeichnis relativ zur Projektwurzel.
        """
        prj_root = Path(self.structure.prj_root).expanduser()
        return prj_root / (self.structure.output_path or "output")


if __name__ == "__main__":
    config = Config()
    logger.info("Projektwurzel: {}", config.structure.prj_root)
    # Validierung erfolgt beim Laden automatisch
