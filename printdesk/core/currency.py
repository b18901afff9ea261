from __future__ import annotations

from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation
from typing import Iterable
import logging
import re

logger = logging.getLogger(__name__)

# Generic formatter symbols; codes not listed are printed as "<CODE> 1,234.56"
_SYMBOLS = {
	"USD": "$",
	"EUR": "€",
	"GBP": "£",
	"JPY": "¥",
	"CNY": "CN¥",
	"INR": "₹",
	"CAD": "CA$",
	"AUD": "A$",
}
# Currencies printed without minor units by the generic formatter
_ZERO_DECIMALS = {"JPY", "KRW", "HUF", "ISK", "CLP", "PYG"}
_CODE_RE = re.compile(r"^[A-Z]{3}$")


def to_decimal(x: object) -> Decimal:
	"""Best-effort conversion to Decimal via str to avoid binary float artifacts."""
	try:
		return Decimal(str(x))
	except (InvalidOperation, ValueError, TypeError):
		return Decimal("0")


def round_money_dec(x: float | Decimal) -> Decimal:
	"""Round to 2 decimals and return Decimal for high-precision internal math."""
	d = to_decimal(x)
	return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)


def sum_money(values: Iterable[float | Decimal]) -> Decimal:
	"""Accumulate monetary values using Decimal and banker's rounding at the end."""
	total = Decimal("0")
	for v in values:
		total += to_decimal(v)
	return round_money_dec(total)


def _group(value: Decimal, places: int, thousands: str, decimal_sep: str) -> str:
	q = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)
	s = f"{abs(q):,.{places}f}"
	s = s.replace(",", "\0").replace(".", decimal_sep).replace("\0", thousands)
	return ("-" if q < 0 else "") + s


def _format_bam(amount: Decimal) -> str:
	# Convertible mark uses the local "1.234,56 KM" suffix form
	return f"{_group(amount, 2, '.', ',')} KM"


def _format_generic(amount: Decimal, code: str) -> str:
	if not _CODE_RE.match(code):
		raise ValueError(f"Invalid currency code: {code!r}")
	places = 0 if code in _ZERO_DECIMALS else 2
	number = _group(amount, places, ",", ".")
	symbol = _SYMBOLS.get(code)
	sign, digits = ("-", number[1:]) if number.startswith("-") else ("", number)
	if symbol is None:
		return f"{sign}{code} {digits}"
	return f"{sign}{symbol}{digits}"


def format_currency(amount: object, code: str | None) -> str:
	"""Format an amount for print; never raises.

	Falls back to the literal "<amount> <code>" when the value or code cannot be formatted.
	"""
	code_s = str(code or "").strip().upper()
	try:
		value = Decimal(str(amount))
		if not value.is_finite():
			raise ValueError(f"Non-finite amount: {amount!r}")
		if code_s == "BAM":
			return _format_bam(value)
		return _format_generic(value, code_s)
	except (InvalidOperation, ValueError, TypeError):
		logger.debug("Falling back to literal currency format for %r %r", amount, code)
		return f"{amount} {code}"


def fmt_weight(kg: float | Decimal) -> str:
	"""Weight with two decimals and unit, as printed in tables and labels."""
	return f"{round_money_dec(kg):.2f} kg"
