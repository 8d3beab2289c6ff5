from decimal import Decimal
from io import BytesIO
from typing import List, Optional, Tuple

from babel.dates import format_date
from loguru import logger
from pydantic import BaseModel, ConfigDict
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from pydantic_models.config.formatting_config import FormattingConfig
from pydantic_models.data.invoice_data import InvoiceData, Language
from shared_modules.entity import Creditor, Entity
from shared_modules.utils import format_amount, safe_str, to_date

from .labels import LabelSet, labels_for
from .qr_payload import CURRENCY, DEFAULT_COUNTRY, build_message, country_code

# Zahlteil: 105 × 210 mm am unteren Rand einer A4-Seite,
# Empfangsschein 62 mm, Zahlteil 148 mm breit
SLIP_HEIGHT_RATIO = 105 / 297
RECEIPT_WIDTH_RATIO = 62 / 210
PAYMENT_WIDTH_RATIO = 148 / 210
QR_SIZE = 46 * mm
CROSS_SIZE = 7 * mm
QR_TOP_OFFSET = 17 * mm
SLIP_MARGIN = 5 * mm

PAGE_MARGIN = 15 * mm
FOOTER_Y = 12 * mm
CONTENT_BOTTOM = 25 * mm

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

PRIMARY = colors.HexColor("#2563eb")
PRIMARY_DARK = colors.HexColor("#1e40af")
TEXT = colors.HexColor("#1f2937")
MUTED = colors.HexColor("#6b7280")
LIGHT_BG = colors.HexColor("#f3f4f6")
ROW_ALT_BG = colors.HexColor("#f9fafb")
LINE = colors.HexColor("#e5e7eb")
NOTE_BG = colors.HexColor("#fef3c7")
NOTE_BORDER = colors.HexColor("#f59e0b")
SCHEDULE_BG = colors.HexColor("#f0f9ff")


class SlipGeometry(BaseModel):
    """
    Feste Abmessungen des Zahlteils (in Punkt, Ursprung unten links).
    Die Werte hängen nur von der Seitengrösse ab, nie vom Inhalt.
    """
    model_config = ConfigDict(frozen=True)

    page_width: float
    page_height: float
    slip_height: float
    receipt_width: float
    payment_width: float
    qr_x: float
    qr_y: float
    qr_size: float = QR_SIZE
    cross_size: float = CROSS_SIZE

    @property
    def qr_center(self) -> Tuple[float, float]:
        return self.qr_x + self.qr_size / 2, self.qr_y + self.qr_size / 2

    @property
    def cross_origin(self) -> Tuple[float, float]:
        cx, cy = self.qr_center
        return cx - self.cross_size / 2, cy - self.cross_size / 2


def slip_geometry(page_width: float = A4[0], page_height: float = A4[1]) -> SlipGeometry:
    slip_height = page_height * SLIP_HEIGHT_RATIO
    receipt_width = page_width * RECEIPT_WIDTH_RATIO
    return SlipGeometry(
        page_width=page_width,
        page_height=page_height,
        slip_height=slip_height,
        receipt_width=receipt_width,
        payment_width=page_width * PAYMENT_WIDTH_RATIO,
        qr_x=receipt_width + SLIP_MARGIN,
        qr_y=slip_height - QR_TOP_OFFSET - QR_SIZE,
    )


def format_iban(iban: str) -> str:
    """IBAN in Vierergruppen ("CH93 0076 2011 6238 5295 7")."""
    compact = safe_str(iban).replace(" ", "").upper()
    return " ".join(compact[i:i + 4] for i in range(0, len(compact), 4))


def format_number(value: Decimal) -> str:
    """Zahl ohne überflüssige Nullen: 10 -> "10", 12.50 -> "12.5"."""
    return format(Decimal(value).normalize(), "f")


class _PageWriter:
    """
    Schreibzustand einer einzelnen Dokumenterzeugung (Canvas + aktuelle Höhe).
    Wird pro Aufruf neu angelegt.
    """

    def __init__(self, c: canvas.Canvas, labels: LabelSet):
        self.c = c
        self.labels = labels
        self.width, self.height = A4
        self.left = PAGE_MARGIN
        self.right = self.width - PAGE_MARGIN
        self.y = self.height - PAGE_MARGIN

    @property
    def content_width(self) -> float:
        return self.right - self.left

    def ensure_space(self, needed: float) -> None:
        """Beginnt eine Folgeseite, wenn der Platz nicht mehr reicht."""
        if self.y - needed >= CONTENT_BOTTOM:
            return
        self.draw_footer()
        self.c.showPage()
        self.y = self.height - PAGE_MARGIN
        self.c.setFont(FONT, 8)
        self.c.setFillColor(MUTED)
        self.c.drawString(self.left, self.y - 8, f"({self.labels.continued})")
        self.y -= 20

    def draw_footer(self) -> None:
        self.c.setStrokeColor(LINE)
        self.c.setLineWidth(0.5)
        self.c.line(self.left, FOOTER_Y + 10, self.right, FOOTER_Y + 10)
        self.c.setFont(FONT, 8)
        self.c.setFillColor(colors.HexColor("#9ca3af"))
        self.c.drawCentredString(self.width / 2, FOOTER_Y, self.labels.footer_text)


class InvoiceLayout:
    """
    Setzt das zweiteilige Rechnungsdokument: Rechnungsseite(n) und Zahlteil.
    Hält keinen Zustand zwischen Aufrufen; jede Erzeugung nutzt eigene Puffer.
    """

    def __init__(self, formatting: Optional[FormattingConfig] = None):
        self.formatting: FormattingConfig = formatting or FormattingConfig()

    # ------------------------------------------------------------------ API

    def render(self, invoice: InvoiceData, creditor: Creditor, qr_png: Optional[bytes]) -> bytes:
        """
        Erzeugt das PDF als Bytes.

        Args:
            invoice (InvoiceData): Rechnungsdaten.
            creditor (Creditor): Aufgelöster Rechnungssteller inkl. IBAN.
            qr_png (bytes, optional): QR-Bild; None ergibt einen Platzhalter.
        Returns:
            bytes: PDF-Dokument.
        """
        labels = labels_for(invoice.language)
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)
        c.setTitle(f"{labels.invoice} {invoice.invoice_number}")
        c.setAuthor(safe_str(creditor.name))
        c.setSubject(build_message(invoice))

        writer = _PageWriter(c, labels)
        self._draw_content(writer, invoice, creditor)
        writer.draw_footer()
        c.showPage()

        self._draw_payment_slip(c, labels, invoice, creditor, qr_png)
        c.showPage()
        c.save()
        logger.debug(f"PDF für Rechnung {invoice.invoice_number} gesetzt ({c.getPageNumber() - 1} Seiten).")
        return buf.getvalue()

    # ---------------------------------------------------------- Rechnungsseite

    def format_date(self, value: str, language: Language) -> str:
        """
        Datum im konfigurierten Format; nicht erkennbare Eingaben bleiben unverändert.
        """
        parsed = to_date(value)
        if parsed is None:
            return safe_str(value)
        locale = self.formatting.locale_en if language == Language.EN else self.formatting.locale_de
        return format_date(parsed, format=self.formatting.date_format, locale=locale)

    def _draw_content(self, w: _PageWriter, invoice: InvoiceData, creditor: Creditor) -> None:
        self._draw_header(w, creditor)
        self._draw_details(w, invoice)
        self._draw_bill_to(w, invoice)
        self._draw_items(w, invoice)
        self._draw_totals(w, invoice)
        if invoice.has_installments:
            self._draw_installments(w, invoice)
        self._draw_bank_details(w, creditor)
        if invoice.note:
            self._draw_notes(w, invoice.note)

    def _draw_header(self, w: _PageWriter, creditor: Creditor) -> None:
        c = w.c
        c.setFillColor(PRIMARY_DARK)
        c.setFont(FONT_BOLD, 20)
        w.y -= 20
        c.drawString(w.left, w.y, safe_str(creditor.name))

        details = [creditor.address_line, creditor.zip_city, creditor.email, creditor.phone, creditor.website]
        c.setFont(FONT, 9)
        c.setFillColor(MUTED)
        w.y -= 14
        c.drawString(w.left, w.y, " • ".join(part for part in details if part))

        w.y -= 8
        c.setStrokeColor(PRIMARY)
        c.setLineWidth(2)
        c.line(w.left, w.y, w.right, w.y)
        w.y -= 10

    def _draw_details(self, w: _PageWriter, invoice: InvoiceData) -> None:
        c, t = w.c, w.labels
        c.setFillColor(TEXT)
        c.setFont(FONT_BOLD, 18)
        w.y -= 30
        c.drawString(w.left, w.y, t.invoice)
        w.y -= 10

        rows = [(t.invoice_number, invoice.invoice_number)]
        if invoice.contract_number:
            rows.append((t.contract_number, invoice.contract_number))
        rows.append((t.invoice_date, self.format_date(invoice.issue_date, invoice.language)))
        if invoice.due_date:
            rows.append((t.due_date, self.format_date(invoice.due_date, invoice.language)))

        value_x = w.left + w.content_width * 0.3
        for label, value in rows:
            w.y -= 14
            c.setFont(FONT_BOLD, 10)
            c.setFillColor(colors.HexColor("#374151"))
            c.drawString(w.left, w.y, f"{label}:")
            c.setFont(FONT, 10)
            c.setFillColor(TEXT)
            c.drawString(value_x, w.y, safe_str(value))
        w.y -= 15

    def _debtor_lines(self, debtor: Entity, email: str = "") -> List[str]:
        lines = [debtor.name]
        if email:
            lines.append(email)
        lines += [debtor.address_line, debtor.zip_city, debtor.country]
        return [line for line in lines if line]

    def _draw_bill_to(self, w: _PageWriter, invoice: InvoiceData) -> None:
        c = w.c
        lines = self._debtor_lines(invoice.debtor, invoice.debtor.email)
        box_height = 24 + 13 * len(lines)
        w.ensure_space(box_height + 10)
        c.setFillColor(LIGHT_BG)
        c.roundRect(w.left, w.y - box_height, w.content_width, box_height, 4, stroke=0, fill=1)

        y = w.y - 14
        c.setFont(FONT_BOLD, 9)
        c.setFillColor(MUTED)
        c.drawString(w.left + 10, y, w.labels.bill_to)
        c.setFont(FONT, 10)
        c.setFillColor(TEXT)
        for line in lines:
            y -= 13
            c.drawString(w.left + 10, y, line)
        w.y -= box_height + 20

    def _columns(self, w: _PageWriter) -> List[float]:
        """Linke Kanten der vier Tabellenspalten (45/15/15/25 %)."""
        widths = [0.45, 0.15, 0.15, 0.25]
        edges, x = [], w.left
        for width in widths:
            edges.append(x)
            x += w.content_width * width
        return edges

    def _draw_table_header(self, w: _PageWriter) -> None:
        c, t = w.c, w.labels
        cols = self._columns(w)
        row_height = 20
        c.setFillColor(PRIMARY)
        c.rect(w.left, w.y - row_height, w.content_width, row_height, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont(FONT_BOLD, 9)
        text_y = w.y - 13
        c.drawString(cols[0] + 8, text_y, t.description)
        c.drawCentredString(cols[1] + w.content_width * 0.075, text_y, t.quantity)
        c.drawCentredString(cols[2] + w.content_width * 0.075, text_y, t.unit)
        c.drawRightString(w.right - 8, text_y, t.amount)
        w.y -= row_height

    def _draw_items(self, w: _PageWriter, invoice: InvoiceData) -> None:
        c = w.c
        cols = self._columns(w)
        desc_width = w.content_width * 0.45 - 16
        w.ensure_space(60)
        self._draw_table_header(w)

        for index, item in enumerate(invoice.items):
            desc_lines = simpleSplit(item.description or "", FONT, 9, desc_width) or [""]
            row_height = 10 + 11 * len(desc_lines)
            if w.y - row_height < CONTENT_BOTTOM:
                w.ensure_space(row_height + 20)
                self._draw_table_header(w)
            if index % 2 == 1:
                c.setFillColor(ROW_ALT_BG)
                c.rect(w.left, w.y - row_height, w.content_width, row_height, stroke=0, fill=1)

            c.setFillColor(TEXT)
            c.setFont(FONT, 9)
            text_y = w.y - 14
            for n, line in enumerate(desc_lines):
                c.drawString(cols[0] + 8, text_y - n * 11, line)
            c.drawCentredString(cols[1] + w.content_width * 0.075, text_y, format_number(item.quantity))
            c.drawCentredString(cols[2] + w.content_width * 0.075, text_y, item.unit)
            c.drawRightString(w.right - 8, text_y, f"{format_amount(item.line_total)} {CURRENCY}")

            c.setStrokeColor(LINE)
            c.setLineWidth(1)
            c.line(w.left, w.y - row_height, w.right, w.y - row_height)
            w.y -= row_height
        w.y -= 20

    def _draw_totals(self, w: _PageWriter, invoice: InvoiceData) -> None:
        c, t = w.c, w.labels
        w.ensure_space(80)
        x0 = w.left + w.content_width / 2
        rows = [(f"{t.subtotal}:", f"{format_amount(invoice.subtotal)} {CURRENCY}")]
        if invoice.discount > 0:
            rows.append(
                (
                    f"{t.discount} ({format_number(invoice.discount)}%):",
                    f"-{format_amount(invoice.discount_amount)} {CURRENCY}",
                )
            )
        for label, value in rows:
            w.y -= 16
            c.setFont(FONT, 10)
            c.setFillColor(colors.HexColor("#374151"))
            c.drawString(x0 + 5, w.y, label)
            c.setFont(FONT_BOLD, 10)
            c.setFillColor(TEXT)
            c.drawRightString(w.right - 5, w.y, value)

        w.y -= 10
        box_height = 24
        c.setFillColor(PRIMARY)
        c.roundRect(x0, w.y - box_height, w.right - x0, box_height, 4, stroke=0, fill=1)
        c.setFillColor(colors.white)
        c.setFont(FONT_BOLD, 12)
        c.drawString(x0 + 8, w.y - 16, f"{t.total}:")
        c.drawRightString(w.right - 8, w.y - 16, f"{format_amount(invoice.total)} {CURRENCY}")
        w.y -= box_height + 15

    def _draw_installments(self, w: _PageWriter, invoice: InvoiceData) -> None:
        c, t = w.c, w.labels
        box_height = 28 + 14 * len(invoice.installments)
        w.ensure_space(box_height + 10)
        self._draw_side_box(w, box_height, SCHEDULE_BG, PRIMARY)

        y = w.y - 15
        c.setFont(FONT_BOLD, 10)
        c.setFillColor(PRIMARY_DARK)
        c.drawString(w.left + 10, y, t.installments)
        c.setFont(FONT, 9)
        c.setFillColor(TEXT)
        for number, installment in enumerate(invoice.installments, start=1):
            y -= 14
            date_text = self.format_date(installment.date, invoice.language)
            c.drawString(w.left + 10, y, f"{t.installment_prefix} {number}: {date_text}")
            c.drawRightString(w.right - 10, y, f"{format_amount(installment.amount)} {CURRENCY}")
        w.y -= box_height + 12

    def _draw_bank_details(self, w: _PageWriter, creditor: Creditor) -> None:
        c, t = w.c, w.labels
        rows = [
            (t.bank, creditor.bank_name),
            (t.swift, creditor.swift),
            (t.iban, format_iban(creditor.iban or "")),
        ]
        rows = [(label, value) for label, value in rows if value]
        if not rows:
            return
        w.ensure_space(20 + 13 * len(rows))
        w.y -= 12
        c.setFont(FONT_BOLD, 10)
        c.setFillColor(TEXT)
        c.drawString(w.left, w.y, t.bank_details)
        value_x = w.left + w.content_width * 0.3
        for label, value in rows:
            w.y -= 13
            c.setFont(FONT_BOLD, 9)
            c.drawString(w.left, w.y, f"{label}:")
            c.setFont(FONT, 9)
            c.drawString(value_x, w.y, value)
        w.y -= 12

    def _draw_notes(self, w: _PageWriter, note: str) -> None:
        c = w.c
        lines: List[str] = []
        for paragraph in note.splitlines() or [note]:
            lines += simpleSplit(paragraph, FONT, 9, w.content_width - 20) or [""]
        box_height = 28 + 12 * len(lines)
        w.ensure_space(box_height + 10)
        self._draw_side_box(w, box_height, NOTE_BG, NOTE_BORDER)

        y = w.y - 15
        c.setFont(FONT_BOLD, 10)
        c.setFillColor(colors.HexColor("#92400e"))
        c.drawString(w.left + 10, y, w.labels.notes)
        c.setFont(FONT, 9)
        c.setFillColor(colors.HexColor("#78350f"))
        for line in lines:
            y -= 12
            c.drawString(w.left + 10, y, line)
        w.y -= box_height + 12

    def _draw_side_box(self, w: _PageWriter, height: float, fill, border) -> None:
        c = w.c
        c.setFillColor(fill)
        c.rect(w.left, w.y - height, w.content_width, height, stroke=0, fill=1)
        c.setFillColor(border)
        c.rect(w.left, w.y - height, 3, height, stroke=0, fill=1)

    # --------------------------------------------------------------- Zahlteil

    def _address_lines(self, entity: Entity) -> List[str]:
        """
        Adresse für den Zahlteil; ausserhalb der Schweiz mit Länderpräfix ("DE-10115 Berlin").
        """
        code = country_code(entity.country, DEFAULT_COUNTRY)
        zip_city = entity.zip_city
        if zip_city and code != DEFAULT_COUNTRY:
            zip_city = f"{code}-{zip_city}"
        return [line for line in [entity.name, entity.address_line, zip_city] if line]

    def _draw_block(
        self, c: canvas.Canvas, x: float, y: float, heading: str, lines: List[str],
        heading_size: float, value_size: float, max_width: float,
    ) -> float:
        """Überschrift + Werte; gibt die neue y-Position zurück."""
        c.setFont(FONT_BOLD, heading_size)
        c.drawString(x, y, heading)
        y -= value_size + 1
        c.setFont(FONT, value_size)
        for line in lines:
            for part in simpleSplit(line, FONT, value_size, max_width) or [""]:
                c.drawString(x, y, part)
                y -= value_size + 1
        return y - value_size / 2

    def _draw_perforation(self, c: canvas.Canvas, geo: SlipGeometry) -> None:
        c.saveState()
        c.setStrokeColor(colors.black)
        c.setLineWidth(0.5)
        c.setDash(3, 2)
        c.line(0, geo.slip_height, geo.page_width, geo.slip_height)
        c.line(geo.receipt_width, 0, geo.receipt_width, geo.slip_height)
        c.restoreState()
        # Scherensymbol auf der Trennlinie
        c.setFont("ZapfDingbats", 9)
        c.setFillColor(colors.black)
        c.drawString(SLIP_MARGIN, geo.slip_height - 3, "\x22")

    def _draw_swiss_cross(self, c: canvas.Canvas, geo: SlipGeometry) -> None:
        """
        Schweizerkreuz (7 × 7 mm) exakt in der Mitte des QR-Bereichs.
        """
        x, y = geo.cross_origin
        size = geo.cross_size
        border = 0.5 * mm
        c.saveState()
        c.setFillColor(colors.white)
        c.rect(x, y, size, size, stroke=0, fill=1)
        c.setFillColor(colors.black)
        c.rect(x + border, y + border, size - 2 * border, size - 2 * border, stroke=0, fill=1)
        inner = size - 2 * border
        arm_long = inner * 0.6
        arm_short = inner * 0.18
        cx, cy = geo.qr_center
        c.setFillColor(colors.white)
        c.rect(cx - arm_short / 2, cy - arm_long / 2, arm_short, arm_long, stroke=0, fill=1)
        c.rect(cx - arm_long / 2, cy - arm_short / 2, arm_long, arm_short, stroke=0, fill=1)
        c.restoreState()

    def _draw_qr(self, c: canvas.Canvas, geo: SlipGeometry, qr_png: Optional[bytes], labels: LabelSet) -> None:
        if qr_png:
            try:
                image = ImageReader(BytesIO(qr_png))
                c.drawImage(
                    image, geo.qr_x, geo.qr_y, geo.qr_size, geo.qr_size,
                    preserveAspectRatio=True, anchor="c",
                )
                self._draw_swiss_cross(c, geo)
                return
            except Exception as e:
                logger.error(f"QR-Bild konnte nicht eingebettet werden: {e}")
        # Platzhalter: sichtbarer Rahmen mit Hinweis, Rechnung wird trotzdem erzeugt
        c.saveState()
        c.setStrokeColor(colors.black)
        c.setLineWidth(0.75)
        c.setDash(2, 2)
        c.rect(geo.qr_x, geo.qr_y, geo.qr_size, geo.qr_size, stroke=1, fill=0)
        c.setFont(FONT, 8)
        c.setFillColor(colors.black)
        cx, cy = geo.qr_center
        c.drawCentredString(cx, cy - 3, labels.qr_unavailable)
        c.restoreState()

    def _draw_amount(self, c: canvas.Canvas, x: float, y: float, labels: LabelSet, amount: str,
                     heading_size: float, value_size: float, amount_offset: float) -> None:
        """Währung und Betrag als getrennte Felder."""
        c.setFont(FONT_BOLD, heading_size)
        c.drawString(x, y, labels.currency)
        c.drawString(x + amount_offset, y, labels.amount)
        c.setFont(FONT, value_size)
        c.drawString(x, y - value_size - 2, CURRENCY)
        c.drawString(x + amount_offset, y - value_size - 2, amount)

    def _draw_payment_slip(
        self, c: canvas.Canvas, labels: LabelSet, invoice: InvoiceData,
        creditor: Creditor, qr_png: Optional[bytes],
    ) -> None:
        width, height = A4
        geo = slip_geometry(width, height)
        amount = format_amount(invoice.total)
        creditor_lines = [format_iban(creditor.iban or "")] + self._address_lines(creditor)
        debtor_lines = self._address_lines(invoice.debtor)

        self._draw_perforation(c, geo)
        c.setFillColor(colors.black)

        # Empfangsschein
        x = SLIP_MARGIN
        receipt_text_width = geo.receipt_width - 2 * SLIP_MARGIN
        y = geo.slip_height - SLIP_MARGIN - 11
        c.setFont(FONT_BOLD, 11)
        c.drawString(x, y, labels.receipt)
        y -= 16
        y = self._draw_block(c, x, y, labels.account_payable_to, creditor_lines, 6, 8, receipt_text_width)
        self._draw_block(c, x, y, labels.payable_by, debtor_lines, 6, 8, receipt_text_width)
        self._draw_amount(c, x, geo.slip_height - 68 * mm, labels, amount, 6, 8, 12 * mm)
        c.setFont(FONT_BOLD, 6)
        c.drawRightString(geo.receipt_width - SLIP_MARGIN, 18 * mm, labels.acceptance_point)

        # Zahlteil
        x = geo.receipt_width + SLIP_MARGIN
        y = geo.slip_height - SLIP_MARGIN - 11
        c.setFont(FONT_BOLD, 11)
        c.drawString(x, y, labels.payment_part)
        self._draw_qr(c, geo, qr_png, labels)
        c.setFillColor(colors.black)
        self._draw_amount(c, x, geo.qr_y - 5 * mm - 8, labels, amount, 8, 10, 14 * mm)

        info_x = geo.qr_x + geo.qr_size + SLIP_MARGIN
        info_width = geo.page_width - info_x - SLIP_MARGIN
        y = geo.slip_height - SLIP_MARGIN - 11
        y = self._draw_block(c, info_x, y, labels.account_payable_to, creditor_lines, 8, 10, info_width)
        y = self._draw_block(c, info_x, y, labels.additional_information, [build_message(invoice)], 8, 10, info_width)
        self._draw_block(c, info_x, y, labels.payable_by, debtor_lines, 8, 10, info_width)
