from datetime import date
from pathlib import Path

import pytest
import yaml

from invoices.modules.sample_data import sample_payload
from pydantic_models.data.form_input import to_invoice_data
from pydantic_models.data.invoice_data import InvoiceData, Language
from shared_modules.config import Config

ENV_VARS = (
    "INVOICE_CONFIG",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
    "GOOGLE_PRIVATE_KEY_ENC",
    "GOOGLE_SHEETS_SPREADSHEET_ID",
    "CLIENTS_SHEET_RANGE",
    "CONTRACTS_SHEET_RANGE",
    "INVOICES_SHEET_RANGE",
    "N8N_WEBHOOK_URL",
    "FERNET_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    Config.reset()


@pytest.fixture
def config_path(tmp_path) -> Path:
    path = tmp_path / "invoice_config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "structure": {"prj_root": str(tmp_path), "output_path": "output"},
                "logging": {"log_level": "DEBUG"},
                "webhook": {"timeout": 5},
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config(config_path) -> Config:
    Config.reset()
    return Config(config_path)


@pytest.fixture
def today() -> date:
    return date(2024, 3, 1)


@pytest.fixture
def invoice_de() -> InvoiceData:
    return to_invoice_data(sample_payload(Language.DE))


@pytest.fixture
def invoice_en() -> InvoiceData:
    return to_invoice_data(sample_payload(Language.EN))
