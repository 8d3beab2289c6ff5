from io import BytesIO

import pytest
from PIL import Image

from invoices.modules.qr_renderer import QrRenderer, effective_level, qr_size_px
from pydantic_models.config.qr_bill_config import QrBillConfig


def test_size_for_46mm_at_300_dpi():
    assert qr_size_px(46, 300) == 543
    assert QrRenderer().size_px == 543


def test_render_returns_square_png_without_border():
    png = QrRenderer().render("SPC\r\n0200\r\n1")

    assert png is not None
    img = Image.open(BytesIO(png))
    assert img.format == "PNG"
    assert img.size == (543, 543)
    # Kein Rand: die Ecke gehört zum Positionsmuster
    assert img.convert("L").getpixel((0, 0)) == 0


@pytest.mark.parametrize("level, expected", [("L", "M"), ("m", "M"), ("Q", "Q"), ("H", "H")])
def test_error_correction_never_below_m(level, expected):
    assert effective_level(level) == expected


def test_unknown_level_is_rejected():
    with pytest.raises(ValueError):
        effective_level("X")


def test_from_config_uses_dpi():
    renderer = QrRenderer.from_config(QrBillConfig(error_correction="l", dpi=600))
    assert renderer.level == "M"
    assert renderer.size_px == qr_size_px(46, 600)


def test_encoder_failure_returns_none():
    # Zu viele Daten für jede QR-Version
    assert QrRenderer().render("x" * 5000) is None
