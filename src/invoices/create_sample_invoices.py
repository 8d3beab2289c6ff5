import sys
from pathlib import Path
from typing import List

from loguru import logger
from rich import print

from invoices.modules.document_utils import DocumentUtils
from invoices.modules.invoice_factory import InvoiceFactory
from invoices.modules.sample_data import sample_payload
from pydantic_models.data.form_input import parse_language
from pydantic_models.data.invoice_data import Language
from shared_modules.config import Config
from shared_modules.utils import ensure_dir, log_exceptions


def main() -> None:
    """
    Erzeugt die Beispielrechnungen (Englisch und Deutsch) im Ausgabeverzeichnis
    und fasst sie zu einer Sammel-PDF zusammen.
    Optional als Argument: Sprache ("en" oder "de"), sonst beide.
    """
    config = Config()
    output_path: Path = ensure_dir(config.get_output_dir())

    if len(sys.argv) > 1:
        languages = [parse_language(sys.argv[1])]
    else:
        languages = [Language.EN, Language.DE]

    factory = InvoiceFactory(config)
    documents: List[bytes] = []
    for language in languages:
        with log_exceptions(f"Beispielrechnung {language.value} fehlgeschlagen"):
            generated = factory.generate(sample_payload(language))
            target = output_path / f"sample-{language.value.lower()}-{generated.filename}"
            DocumentUtils.save_pdf(generated.content, target)
            documents.append(generated.content)
            print(f"[green]✓[/green] {target} ({DocumentUtils.count_pages(generated.content)} Seiten)")

    if len(documents) > 1:
        merged = DocumentUtils.save_pdf(DocumentUtils.merge_pdfs(documents), output_path / "sample-invoices.pdf")
        print(f"[bold]Sammel-PDF:[/bold] {merged}")
    logger.success("Beispielrechnungen erstellt.")


if __name__ == "__main__":
    main()
