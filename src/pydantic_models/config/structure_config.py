from typing import Optional
from pydantic import BaseModel

class StructureConfig(BaseModel):
    """
    Modell für die Struktur-Konfiguration des Projekts.

    Attribute:
        prj_root (str): Wurzelverzeichnis des Projekts.
        output_path (Optional[str]): Ausgabeverzeichnis für erzeugte PDFs relativ zu prj_root (Standard: "output").
    """
    prj_root: str = "."
    output_path: Optional[str] = "output"
