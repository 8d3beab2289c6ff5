from typing import Optional
from pydantic import BaseModel

class SheetsConfig(BaseModel):
    """
    Zugriff auf die Stammdaten-Tabelle (Google Sheets).
    Zugangsdaten selbst kommen ausschliesslich aus der Umgebung.
    """
    spreadsheet_id: Optional[str] = None
    clients_range: str = "Client_Info!A2:L"
    contracts_range: str = "Contract_Details!A2:Z"
    invoices_range: str = "Invoices!A2:Z"
    scopes: list[str] = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
