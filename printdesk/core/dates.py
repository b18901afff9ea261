from __future__ import annotations

import datetime as _dt
import logging
from typing import Any

logger = logging.getLogger(__name__)

PRINT_FORMAT = "%d/%m/%Y"


def parse_date(val: Any) -> _dt.date | None:
	"""Accept date/datetime objects and ISO strings (a time part is ignored)."""
	if isinstance(val, _dt.datetime):
		return val.date()
	if isinstance(val, _dt.date):
		return val
	if isinstance(val, str) and val.strip():
		raw = val.strip().split("T")[0].split(" ")[0]
		try:
			return _dt.date.fromisoformat(raw)
		except ValueError:
			return None
	return None


def fmt_date(val: Any, empty: str = "") -> str:
	"""Format a date as dd/mm/yyyy for print; never raises.

	Unparseable values are printed literally so the document still renders.
	"""
	if val is None or val == "":
		return empty
	d = parse_date(val)
	if d is None:
		logger.debug("Printing unparseable date literally: %r", val)
		return str(val)
	return d.strftime(PRINT_FORMAT)


def file_stamp(today: _dt.date | None = None) -> str:
	"""ISO date used in exported file names."""
	return (today or _dt.date.today()).isoformat()
