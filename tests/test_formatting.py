from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from printdesk.core.currency import fmt_weight, format_currency
from printdesk.core.dates import fmt_date, parse_date
from printdesk.core.translations import BOSNIAN, ENGLISH, country_code, is_domestic, translations_for


@pytest.mark.parametrize(
    "amount,code,expected",
    [
        (Decimal("1234.5"), "BAM", "1.234,50 KM"),
        (Decimal("-12"), "BAM", "-12,00 KM"),
        (Decimal("1234.5"), "EUR", "€1,234.50"),
        (Decimal("1234.5"), "usd", "$1,234.50"),
        (Decimal("1234.5"), "JPY", "¥1,234"),
        (Decimal("1234.5"), "CHF", "CHF 1,234.50"),
        (Decimal("-5"), "EUR", "-€5.00"),
    ],
)
def test_format_currency(amount, code, expected) -> None:
    assert format_currency(amount, code) == expected


def test_format_currency_falls_back_to_literal() -> None:
    assert format_currency("12", "EURO") == "12 EURO"
    assert format_currency("n/a", "EUR") == "n/a EUR"


def test_fmt_weight() -> None:
    assert fmt_weight(Decimal("1.005")) == "1.00 kg"
    assert fmt_weight(2) == "2.00 kg"


def test_dates_print_day_first() -> None:
    assert fmt_date(date(2024, 3, 1)) == "01/03/2024"
    assert fmt_date("2024-03-01T10:00:00Z") == "01/03/2024"
    assert fmt_date(datetime(2024, 12, 31, 8, 0)) == "31/12/2024"
    assert fmt_date(None) == ""
    assert fmt_date("soon") == "soon"
    assert parse_date("2024-13-01") is None


def test_translations_select_by_exact_country() -> None:
    assert translations_for("Bosnia and Herzegovina") is BOSNIAN
    assert translations_for("bosnia and herzegovina") is ENGLISH
    assert translations_for(None) is ENGLISH
    assert is_domestic("Bosnia and Herzegovina")
    assert ENGLISH.page_of.format(page=2, pages=5) == "Page 2 of 5"
    assert BOSNIAN.page_of.format(page=2, pages=5) == "Strana 2 od 5"


def test_country_codes() -> None:
    assert country_code("Bosnia and Herzegovina") == "BA"
    assert country_code("Germany") == "DE"
    assert country_code("Narnia") == "NA"
    assert country_code("") == ""
    assert country_code(None) == ""
