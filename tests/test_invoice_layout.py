from io import BytesIO

import pytest
from PyPDF2 import PdfReader
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

from invoices.modules.document_utils import DocumentUtils
from invoices.modules.invoice_factory import (
    InvoiceFactory,
    InvoiceInputError,
    InvoiceRenderError,
    invoice_filename,
)
from invoices.modules.invoice_layout import (
    CROSS_SIZE,
    QR_SIZE,
    InvoiceLayout,
    format_iban,
    format_number,
    slip_geometry,
)
from invoices.modules.qr_payload import resolve_creditor
from invoices.modules.sample_data import sample_payload
from pydantic_models.data.form_input import to_invoice_data
from pydantic_models.data.invoice_data import Language


def _pages(content: bytes):
    return [page.extract_text() for page in PdfReader(BytesIO(content)).pages]


@pytest.fixture
def factory(config) -> InvoiceFactory:
    return InvoiceFactory(config)


def test_sample_invoice_has_content_page_and_slip(factory):
    generated = factory.generate(sample_payload(Language.DE))

    assert generated.filename == "invoice-2024-IN-001.pdf"
    assert generated.content_type == "application/pdf"
    assert generated.content.startswith(b"%PDF")

    content_page, slip = _pages(generated.content)
    assert "1485.00 CHF" in content_page
    assert "1650.00 CHF" in content_page
    assert "RECHNUNG" in content_page
    assert "15.02.2024" in content_page
    assert "Zahlteil" in slip
    assert "1485.00" in slip and "CHF" in slip
    assert "CH93 0076 2011 6238 5295 7" in slip


def test_english_labels(factory):
    content_page, slip = _pages(factory.generate(sample_payload("en")).content)

    assert "INVOICE" in content_page
    assert "Payment Schedule" in content_page
    assert "Payment 1" in content_page
    assert "Discount (10%)" in content_page
    assert "Receipt" in slip
    assert "Payment part" in slip
    assert "Invoice 2024/IN/001" in slip


def test_qr_failure_still_produces_two_pages(factory, monkeypatch):
    monkeypatch.setattr(factory.renderer, "render", lambda payload: None)
    content = factory.generate(sample_payload(Language.EN)).content

    pages = _pages(content)
    assert len(pages) == 2
    assert "QR code unavailable" in pages[1]
    assert "1485.00" in pages[1]


def test_optional_sections_are_omitted(factory):
    content = factory.generate(
        {
            "language": "EN",
            "invoiceNumber": "2024/IN/002",
            "debtorName": "Jane Doe",
            "items": [{"name": "Trial lesson", "quantity": 1, "unitPrice": 60}],
        }
    ).content
    content_page = _pages(content)[0]

    assert "60.00 CHF" in content_page
    assert "Discount" not in content_page
    assert "Notes" not in content_page
    assert "Payment Schedule" not in content_page
    assert "Contract Number" not in content_page
    assert "Due Date" not in content_page


def test_long_item_list_continues_on_next_page(factory):
    items = [{"name": f"Lesson {n} " + "grammar and conversation " * 4, "quantity": 1, "unitPrice": 10} for n in range(60)]
    content = factory.generate({"language": "EN", "invoiceNumber": "9", "items": items}).content

    pages = _pages(content)
    assert len(pages) > 2
    assert "600.00 CHF" in "".join(pages[:-1])
    assert "Payment part" in pages[-1]


def test_render_errors_are_wrapped(factory, invoice_de, monkeypatch):
    def broken(*args, **kwargs):
        raise KeyError("font")

    monkeypatch.setattr(factory.layout, "render", broken)
    with pytest.raises(InvoiceRenderError):
        factory.create_pdf(invoice_de)


def test_oversized_total_is_reported_as_render_error(factory):
    invoice = factory.build_invoice(
        {"invoiceNumber": "2024/IN/099", "items": [{"name": "Kurs", "quantity": "1e27", "unitPrice": 75}]}
    )
    with pytest.raises(InvoiceRenderError):
        factory.create_pdf(invoice)


def test_invalid_input_is_reported(factory):
    with pytest.raises(InvoiceInputError):
        factory.generate({"body": "kein Objekt"})


def test_slip_geometry_is_fixed():
    geo = slip_geometry(*A4)

    assert geo.slip_height == pytest.approx(105 * mm, rel=1e-3)
    assert geo.receipt_width == pytest.approx(62 * mm, rel=1e-3)
    assert geo.payment_width == pytest.approx(148 * mm, rel=1e-3)
    assert geo.qr_size == QR_SIZE
    assert geo.cross_size == CROSS_SIZE
    cross_x, cross_y = geo.cross_origin
    center_x, center_y = geo.qr_center
    assert cross_x + CROSS_SIZE / 2 == pytest.approx(center_x)
    assert cross_y + CROSS_SIZE / 2 == pytest.approx(center_y)
    assert geo.qr_x + QR_SIZE <= geo.page_width
    assert geo.qr_y >= 0


def test_layout_renders_directly(invoice_en):
    layout = InvoiceLayout()
    content = layout.render(invoice_en, resolve_creditor(invoice_en), None)
    assert DocumentUtils.count_pages(content) == 2


def test_date_formatting_per_language():
    layout = InvoiceLayout()
    assert layout.format_date("2024-02-15", Language.DE) == "15.02.2024"
    assert layout.format_date("2024-02-15T10:00:00.000Z", Language.EN) == "15.02.2024"
    assert layout.format_date("demnächst", Language.DE) == "demnächst"


def test_helpers():
    assert format_iban("CH9300762011623852957") == "CH93 0076 2011 6238 5295 7"
    assert format_number(to_invoice_data({"invoiceNumber": "1", "discount": 12.5}).discount) == "12.5"
    assert invoice_filename("2024/IN/001") == "invoice-2024-IN-001.pdf"


def test_merge_and_save(factory, tmp_path):
    first = factory.generate(sample_payload(Language.DE)).content
    second = factory.generate(sample_payload(Language.EN)).content

    merged = DocumentUtils.merge_pdfs([first, second])
    assert DocumentUtils.count_pages(merged) == 4

    path = DocumentUtils.save_pdf(merged, tmp_path / "out" / "all.pdf")
    assert path.read_bytes() == merged

    with pytest.raises(ValueError):
        DocumentUtils.merge_pdfs([])
