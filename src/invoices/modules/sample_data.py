from typing import Any, Dict

from pydantic_models.data.form_input import parse_language
from pydantic_models.data.invoice_data import Language


def sample_payload(language: Any = Language.DE) -> Dict[str, Any]:
    """
    Beispielrechnung (20 Std. à 75.00 + Material 150.00, 10 % Rabatt = 1485.00 CHF)
    im Format des Rechnungsformulars.
    """
    en = parse_language(language) == Language.EN
    return {
        "body": {
            "language": "English" if en else "German",
            "debtorName": "John Smith" if en else "Max Mustermann",
            "debtorEmail": "john@example.com" if en else "max@example.com",
            "debtorStreet": "Main Street" if en else "Bahnhofstrasse",
            "debtorHouse": "123",
            "debtorApt": "Apt 4B" if en else "",
            "debtorCity": "Zurich" if en else "Zürich",
            "debtorZip": "8001",
            "debtorCountry": "Switzerland",
            "contractNumber": "CNT-2024-001",
            "invoiceNumber": "2024/IN/001",
            "issueDate": "2024-02-15",
            "dueDate": "2024-02-29",
            "items": [
                {
                    "name": "German Course A1 - Beginner" if en else "Deutschkurs A1 - Anfänger",
                    "quantity": 20,
                    "unit": "hrs" if en else "Std",
                    "unitPrice": 75,
                },
                {
                    "name": "Course Materials and Books" if en else "Kursmaterialien und Bücher",
                    "quantity": 1,
                    "unit": "pcs" if en else "Stk",
                    "unitPrice": 150,
                },
            ],
            "discount": 10,
            "extraNote": (
                "Thank you for your trust. If you have any questions, please feel free to contact us."
                if en
                else "Vielen Dank für Ihr Vertrauen. Bei Fragen stehen wir Ihnen gerne zur Verfügung."
            ),
            "installments": [
                {"date": "2024-02-29", "amount": 742.5},
                {"date": "2024-03-29", "amount": 742.5},
            ],
        }
    }
