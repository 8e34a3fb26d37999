from datetime import date, datetime, timezone

import pytest

from luminor.platform.i18n.context import Context, with_locale
from luminor.platform.i18n.format import format_date_long, format_date_short, format_number
from luminor.platform.i18n.locale import Locale

VALUE = datetime(2026, 3, 4, tzinfo=timezone.utc)


def _ctx(locale):
    return with_locale(Context(), locale)


def test_short_date_french_not_empty():
    assert format_date_short(_ctx(Locale.FR), VALUE) != ""
    assert "4" in format_date_short(_ctx(Locale.FR), VALUE)


@pytest.mark.parametrize(
    ("locale", "expected"),
    [(Locale.EN, "March 4, 2026"), (Locale.DE, "4. Marz 2026"), (Locale.FR, "4 mars 2026")],
)
def test_format_date_long(locale, expected):
    assert format_date_long(_ctx(locale), VALUE) == expected


@pytest.mark.parametrize(
    ("locale", "expected"),
    [(Locale.EN, "Mar 4"), (Locale.DE, "04.03."), (Locale.FR, "4 mars")],
)
def test_format_date_short(locale, expected):
    assert format_date_short(_ctx(locale), VALUE) == expected


def test_default_locale_used_without_locale():
    assert format_date_long(Context(), date(2026, 3, 4)) == "March 4, 2026"


@pytest.mark.parametrize(
    ("locale", "expected"),
    [(Locale.EN, "1,234,567"), (Locale.DE, "1.234.567"), (Locale.FR, "1\u00a0234\u00a0567")],
)
def test_format_number(locale, expected):
    assert format_number(_ctx(locale), 1234567) == expected


def test_format_number_small_and_negative():
    assert format_number(_ctx(Locale.EN), 42) == "42"
    assert format_number(_ctx(Locale.EN), -1234) == "-1,234"