from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from printdesk.core.currency import round_money_dec, sum_money, to_decimal
from printdesk.core.dates import parse_date
from printdesk.core.translations import is_domestic

DEFAULT_VAT_RATE = Decimal("17")


class DocumentKind(str, Enum):
	INVOICE = "invoice"
	ORDER_CONFIRMATION = "order_confirmation"


@dataclass(frozen=True)
class Company:
	"""Letterhead fields printed in every page header."""

	legal_name: str = ""
	address: str = ""
	postal_code: str = ""
	city: str = ""
	country: str = ""
	logo_path: Optional[str] = None

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Company":
		return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

	def letterhead_line(self) -> str:
		parts = [self.legal_name, self.address, f"{self.postal_code} {self.city}".strip(), self.country]
		return " - ".join(p for p in parts if p)


@dataclass(frozen=True)
class Counterparty:
	name: str = ""
	address: str = ""
	city: str = ""
	country: str = ""
	phone: str = ""
	vat_rate: Optional[Decimal] = None
	dap_address: str = ""
	fco_address: str = ""

	@property
	def is_domestic(self) -> bool:
		return is_domestic(self.country)


@dataclass(frozen=True)
class CatalogEntry:
	"""Inventory entry a line item points at for weight/unit/part number."""

	part_number: str = ""
	unit: str = ""
	weight: Decimal = Decimal("0")
	photo_path: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
	id: str
	description: str
	quantity: int
	unit_price: Decimal
	catalog: Optional[CatalogEntry] = None

	def __post_init__(self) -> None:
		if self.quantity < 1:
			raise ValueError(f"Line item {self.id!r} needs a positive quantity, got {self.quantity}")

	@property
	def key(self) -> str:
		"""Stable key used to cache package allocations per item."""
		return f"{self.id}-{self.description}"

	@property
	def line_total(self) -> Decimal:
		return round_money_dec(self.unit_price * self.quantity)

	@property
	def weight(self) -> Decimal:
		per_piece = self.catalog.weight if self.catalog else Decimal("0")
		return per_piece * self.quantity


@dataclass(frozen=True)
class DocumentTotals:
	subtotal: Decimal
	vat: Decimal
	total: Decimal
	total_quantity: int
	net_weight: Decimal
	total_weight: Decimal
	packing: int

	@classmethod
	def compute(
		cls,
		items: Tuple[LineItem, ...],
		vat_rate: Decimal,
		total_weight: Optional[Decimal] = None,
		packing: Optional[int] = None,
	) -> "DocumentTotals":
		"""Computed once per document; pages never re-derive these."""
		subtotal = sum_money(i.line_total for i in items)
		vat = round_money_dec(subtotal * vat_rate / Decimal(100))
		net = sum((i.weight for i in items), Decimal("0"))
		return cls(
			subtotal=subtotal,
			vat=vat,
			total=subtotal + vat,
			total_quantity=sum(i.quantity for i in items),
			net_weight=net,
			total_weight=total_weight if total_weight is not None else net,
			packing=packing if packing is not None else (1 if items else 0),
		)


@dataclass(frozen=True)
class Document:
	kind: DocumentKind
	id: str
	number: str
	issue_date: Optional[date]
	counterparty: Counterparty
	company: Company
	currency: str
	vat_rate: Decimal
	items: Tuple[LineItem, ...]
	totals: DocumentTotals
	due_date: Optional[date] = None
	shipping_date: Optional[date] = None
	order_number: str = ""
	incoterms: str = ""
	declaration_number: str = ""
	shipping_address: str = ""
	reference: str = ""
	notes: str = ""

	@property
	def is_domestic(self) -> bool:
		return self.counterparty.is_domestic

	@classmethod
	def build(cls, kind: DocumentKind, data: Dict[str, Any], company: Optional[Company] = None) -> "Document":
		"""Build a document from the plain mapping returned by a document source."""
		cp_raw = data.get("counterparty") or data.get("customer") or {}
		rate_raw = cp_raw.get("vat_rate")
		counterparty = Counterparty(
			name=str(cp_raw.get("name") or ""),
			address=str(cp_raw.get("address") or ""),
			city=str(cp_raw.get("city") or ""),
			country=str(cp_raw.get("country") or ""),
			phone=str(cp_raw.get("phone") or ""),
			vat_rate=to_decimal(rate_raw) if rate_raw not in (None, "") else None,
			dap_address=str(cp_raw.get("dap_address") or ""),
			fco_address=str(cp_raw.get("fco_address") or ""),
		)
		if company is None:
			company = Company.from_dict(data.get("company") or {})

		items = tuple(_build_item(n, raw) for n, raw in enumerate(data.get("items") or [], start=1))
		# A missing or zero rate falls back to the standard rate, as the printed VAT line always shows one
		vat_rate = counterparty.vat_rate or DEFAULT_VAT_RATE
		tw = data.get("total_weight")
		packing = data.get("packing")
		totals = DocumentTotals.compute(
			items,
			vat_rate,
			total_weight=to_decimal(tw) if tw not in (None, "") else None,
			packing=int(packing) if packing not in (None, "") else None,
		)
		return cls(
			kind=kind,
			id=str(data.get("id") or data.get("number") or ""),
			number=str(data.get("number") or ""),
			issue_date=parse_date(data.get("issue_date")),
			counterparty=counterparty,
			company=company,
			currency=str(data.get("currency") or "EUR"),
			vat_rate=vat_rate,
			items=items,
			totals=totals,
			due_date=parse_date(data.get("due_date")),
			shipping_date=parse_date(data.get("shipping_date")),
			order_number=str(data.get("order_number") or ""),
			incoterms=str(data.get("incoterms") or ""),
			declaration_number=str(data.get("declaration_number") or ""),
			shipping_address=str(data.get("shipping_address") or ""),
			reference=str(data.get("reference") or data.get("contact_person_reference") or ""),
			notes=str(data.get("notes") or ""),
		)


def _build_item(n: int, raw: Dict[str, Any]) -> LineItem:
	cat_raw = raw.get("catalog") or raw.get("inventory")
	catalog = None
	if isinstance(cat_raw, dict):
		catalog = CatalogEntry(
			part_number=str(cat_raw.get("part_number") or ""),
			unit=str(cat_raw.get("unit") or ""),
			weight=to_decimal(cat_raw.get("weight") or 0),
			photo_path=cat_raw.get("photo_path") or None,
		)
	return LineItem(
		id=str(raw.get("id") or n),
		description=str(raw.get("description") or ""),
		quantity=int(raw.get("quantity") or 0),
		unit_price=to_decimal(raw.get("unit_price") or 0),
		catalog=catalog,
	)
