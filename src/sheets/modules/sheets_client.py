from datetime import date
from typing import Any, Dict, List, Optional

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials as ServiceAccountCredentials
from loguru import logger
from requests import RequestException

from pydantic_models.data.sheet_records import ClientRecord, ContractRecord, InvoiceRecord
from shared_modules.config import Config

from .row_parser import parse_client_row, parse_contract_row, parse_invoice_row

TOKEN_URI = "https://oauth2.googleapis.com/token"


class SheetsConfigurationError(RuntimeError):
    """
    Zugangsdaten oder Spreadsheet-ID fehlen bzw. sind unbrauchbar.
    """


class SheetsUnavailableError(RuntimeError):
    """
    Die Tabelle konnte nicht gelesen werden (API- oder Netzwerkfehler).
    """


class SheetsClient:
    """
    Lesender Zugriff auf die Stammdaten-Tabelle mit einem Service-Account.

    Zugangsdaten aus der Umgebung:
        GOOGLE_SERVICE_ACCOUNT_EMAIL
        GOOGLE_PRIVATE_KEY oder (Fernet-verschlüsselt) GOOGLE_PRIVATE_KEY_ENC
        GOOGLE_SHEETS_SPREADSHEET_ID (alternativ sheets.spreadsheet_id)
    """

    def __init__(self, config: Config, client: Optional[gspread.Client] = None):
        self.config: Config = config
        self._client: Optional[gspread.Client] = client

    def _private_key(self) -> Optional[str]:
        key = self.config.get_secret("GOOGLE_PRIVATE_KEY")
        if not key:
            try:
                key = self.config.get_decrypted_secret("GOOGLE_PRIVATE_KEY_ENC")
            except RuntimeError as e:
                raise SheetsConfigurationError(f"Private key not readable: {e}") from e
        # In .env-Dateien steht der Schlüssel meist einzeilig mit "\n"
        return key.replace("\\n", "\n") if key else None

    def _credentials(self) -> ServiceAccountCredentials:
        email = self.config.get_secret("GOOGLE_SERVICE_ACCOUNT_EMAIL")
        if not email:
            raise SheetsConfigurationError("Missing service account email (GOOGLE_SERVICE_ACCOUNT_EMAIL)")
        private_key = self._private_key()
        if not private_key:
            raise SheetsConfigurationError("Missing private key (GOOGLE_PRIVATE_KEY)")
        try:
            return ServiceAccountCredentials.from_service_account_info(
                {"client_email": email, "private_key": private_key, "token_uri": TOKEN_URI},
                scopes=self.config.sheets.scopes,
            )
        except (ValueError, GoogleAuthError) as e:
            logger.error(f"Service-Account-Zugangsdaten ungültig: {e}")
            raise SheetsConfigurationError(f"Invalid service account credentials: {e}") from e

    def spreadsheet_id(self) -> str:
        spreadsheet_id = self.config.get_spreadsheet_id()
        if not spreadsheet_id:
            raise SheetsConfigurationError("Missing spreadsheet ID (GOOGLE_SHEETS_SPREADSHEET_ID)")
        return spreadsheet_id

    @property
    def client(self) -> gspread.Client:
        if self._client is None:
            self._client = gspread.authorize(self._credentials())
        return self._client

    def _spreadsheet(self) -> gspread.Spreadsheet:
        spreadsheet_id = self.spreadsheet_id()
        client = self.client
        try:
            return client.open_by_key(spreadsheet_id)
        except (gspread.exceptions.GSpreadException, GoogleAuthError, RequestException) as e:
            logger.error(f"Spreadsheet {spreadsheet_id} nicht erreichbar: {e}")
            raise SheetsUnavailableError(f"Spreadsheet not reachable: {e}") from e

    def read_range(self, name: str) -> List[List[Any]]:
        """
        Zeilen eines konfigurierten Bereichs (name: clients, contracts, invoices).
        """
        sheet_range = self.config.get_sheet_range(name)
        spreadsheet = self._spreadsheet()
        try:
            response = spreadsheet.values_get(sheet_range)
        except (gspread.exceptions.GSpreadException, GoogleAuthError, RequestException) as e:
            logger.error(f"Bereich {sheet_range} nicht lesbar: {e}")
            raise SheetsUnavailableError(f"Failed to read {sheet_range}: {e}") from e
        rows = response.get("values", [])
        logger.info(f"{len(rows)} Zeilen aus {sheet_range} gelesen.")
        return rows

    def fetch_clients(self, today: Optional[date] = None) -> List[ClientRecord]:
        return [parse_client_row(row, i, today) for i, row in enumerate(self.read_range("clients"))]

    def fetch_contracts(self, today: Optional[date] = None) -> List[ContractRecord]:
        """
        Verträge inkl. Klientenname (Verknüpfung über die Client No).
        """
        contract_rows = self.read_range("contracts")
        clients: Dict[str, ClientRecord] = {
            client.client_no: client
            for client in self.fetch_clients(today)
            if client.client_no
        }
        return [parse_contract_row(row, i, clients, today) for i, row in enumerate(contract_rows)]

    def fetch_invoices(self, today: Optional[date] = None) -> List[InvoiceRecord]:
        return [parse_invoice_row(row, i, today) for i, row in enumerate(self.read_range("invoices"))]

    def sheets_info(self) -> Dict[str, Any]:
        """
        Titel und Tabellenblätter der Stammdaten-Tabelle (zur Diagnose der Konfiguration).
        """
        spreadsheet = self._spreadsheet()
        try:
            worksheets = spreadsheet.worksheets()
        except (gspread.exceptions.GSpreadException, GoogleAuthError, RequestException) as e:
            raise SheetsUnavailableError(f"Failed to get sheets info: {e}") from e
        return {
            "spreadsheetId": spreadsheet.id,
            "spreadsheetTitle": spreadsheet.title,
            "sheets": [
                {"title": ws.title, "sheetId": ws.id, "index": ws.index}
                for ws in worksheets
            ],
            "serviceAccountEmail": self.config.get_secret("GOOGLE_SERVICE_ACCOUNT_EMAIL"),
        }
