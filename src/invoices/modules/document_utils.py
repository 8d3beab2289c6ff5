from io import BytesIO
from pathlib import Path
from typing import Iterable

from loguru import logger
from PyPDF2 import PdfMerger, PdfReader

from shared_modules.utils import ensure_dir


class DocumentUtils:
    """
    Statische Hilfsklasse für PDF-Operationen:
    - Seiten zählen
    - PDFs zusammenführen
    - PDFs speichern
    """

    @staticmethod
    def count_pages(content: bytes) -> int:
        return len(PdfReader(BytesIO(content)).pages)

    @staticmethod
    def merge_pdfs(documents: Iterable[bytes]) -> bytes:
        """
        Führt mehrere PDF-Dokumente zu einem zusammen.

        Args:
            documents (Iterable[bytes]): PDF-Dokumente in der gewünschten Reihenfolge.
        Returns:
            bytes: Sammel-PDF.
        Raises:
            ValueError: Wenn keine Dokumente übergeben wurden.
            RuntimeError: Wenn die Zusammenführung fehlschlägt.
        """
        documents = list(documents)
        if not documents:
            raise ValueError("Keine PDF-Dokumente zum Zusammenführen übergeben.")
        merger = PdfMerger()
        try:
            for content in documents:
                merger.append(BytesIO(content))
            out = BytesIO()
            merger.write(out)
        except Exception as e:
            logger.error(f"PDF-Zusammenführung fehlgeschlagen: {e}")
            raise RuntimeError(f"PDF-Zusammenführung fehlgeschlagen: {e}") from e
        finally:
            merger.close()
        return out.getvalue()

    @staticmethod
    def save_pdf(content: bytes, path: Path) -> Path:
        """
        Schreibt ein PDF; fehlende Verzeichnisse werden angelegt.
        """
        path = Path(path)
        ensure_dir(path.parent)
        path.write_bytes(content)
        logger.debug(f"{path.name} gespeichert")
        return path
