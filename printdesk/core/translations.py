from __future__ import annotations

from dataclasses import dataclass

# Counterparties from this country get the local locale and domestic statements
HOME_COUNTRY = "Bosnia and Herzegovina"


@dataclass(frozen=True)
class Translations:
	invoice: str
	order_confirmation: str
	bill_to: str
	invoice_number: str
	order_confirmation_number: str
	issue_date: str
	due_date: str
	order_number: str
	shipping_date: str
	shipping_address: str
	incoterms: str
	declaration_number: str
	reference: str
	part_name: str
	part_number: str
	unit: str
	quantity: str
	subtotal_weight: str
	price: str
	amount: str
	summary: str
	total_quantity: str
	net_weight: str
	total_weight: str
	packing: str
	package: str
	packages: str
	subtotal: str
	vat: str
	total: str
	notes: str
	page_of: str
	pieces: str
	piece: str
	# Unit column fallback when the catalog entry has none
	unit_default: str
	not_available: str


BOSNIAN = Translations(
	invoice="FAKTURA",
	order_confirmation="POTVRDA NARUDŽBE",
	bill_to="Račun za:",
	invoice_number="Broj fakture:",
	order_confirmation_number="Broj potvrde:",
	issue_date="Datum izdavanja:",
	due_date="Datum dospijeća:",
	order_number="Broj narudžbe:",
	shipping_date="Datum isporuke:",
	shipping_address="Adresa isporuke:",
	incoterms="Mjesto isporuke:",
	declaration_number="Broj deklaracije:",
	reference="Referenca:",
	part_name="Naziv dijela",
	part_number="Broj dijela",
	unit="Jed.",
	quantity="Kol.",
	subtotal_weight="Težina",
	price="Cijena",
	amount="Iznos",
	summary="Sažetak",
	total_quantity="Ukupna količina:",
	net_weight="Neto težina:",
	total_weight="Ukupna težina:",
	packing="Pakovanje:",
	package="paket",
	packages="paketa",
	subtotal="Ukupno bez PDV:",
	vat="PDV",
	total="Ukupno:",
	notes="Napomene",
	page_of="Strana {page} od {pages}",
	pieces="komada",
	piece="komad",
	unit_default="kom.",
	not_available="N/A",
)

ENGLISH = Translations(
	invoice="INVOICE",
	order_confirmation="ORDER CONFIRMATION",
	bill_to="Bill To:",
	invoice_number="Invoice Number:",
	order_confirmation_number="Order confirmation number:",
	issue_date="Issue Date:",
	due_date="Due Date:",
	order_number="Order Number:",
	shipping_date="Shipping Date:",
	shipping_address="Shipping address:",
	incoterms="Incoterms:",
	declaration_number="Declaration Number:",
	reference="Reference:",
	part_name="Part name",
	part_number="Part number",
	unit="Unit",
	quantity="Qty",
	subtotal_weight="Weight",
	price="Price",
	amount="Amount",
	summary="Summary",
	total_quantity="Total Quantity:",
	net_weight="Net Weight:",
	total_weight="Total Weight:",
	packing="Packing:",
	package="package",
	packages="packages",
	subtotal="Subtotal:",
	vat="VAT",
	total="Total:",
	notes="Notes",
	page_of="Page {page} of {pages}",
	pieces="pieces",
	piece="piece",
	unit_default="pcs",
	not_available="N/A",
)

# Statements printed on foreign documents (always bilingual, independent of locale)
VAT_EXEMPTION_LINES = (
	"Oslobođeno od plaćanja PDV-a po članu 27. tačka 1. zakona o PDV-u, Službeni glasnik br. 91/05 i 35/05.",
	"Exempt from VAT payment pursuant to Article 27, Item 1 of the VAT Law, Official Gazette No. 91/05 and 35/05.",
)
ORIGIN_DECLARATION = (
	"Izjava: Izvoznik proizvoda obuhvaćenih ovom ispravom izjavljuje da su, osim ako je to drugačije "
	"izričito navedeno, ovi proizvodi bosanskohercegovačkog preferencijalnog porijekla."
)
EXPORTER_SIGNATURE = "Potpis izvoznika:"


def is_domestic(country: str | None) -> bool:
	return country == HOME_COUNTRY


def translations_for(country: str | None) -> Translations:
	"""Exact country-name match selects the local locale; everything else gets English."""
	return BOSNIAN if is_domestic(country) else ENGLISH

# ISO 3166-1 alpha-2 codes for the countries the incoterm place is printed for
COUNTRY_CODES = {
	"United States": "US",
	"United Kingdom": "GB",
	"Canada": "CA",
	"Australia": "AU",
	"Germany": "DE",
	"France": "FR",
	"Italy": "IT",
	"Spain": "ES",
	"Netherlands": "NL",
	"Belgium": "BE",
	"Switzerland": "CH",
	"Austria": "AT",
	"Sweden": "SE",
	"Norway": "NO",
	"Denmark": "DK",
	"Finland": "FI",
	"Poland": "PL",
	"Czech Republic": "CZ",
	"Portugal": "PT",
	"Greece": "GR",
	"Ireland": "IE",
	"Japan": "JP",
	"China": "CN",
	"India": "IN",
	"South Korea": "KR",
	"Brazil": "BR",
	"Mexico": "MX",
	"Bosnia and Herzegovina": "BA",
	"Croatia": "HR",
	"Serbia": "RS",
	"Slovenia": "SI",
	"Slovakia": "SK",
	"Hungary": "HU",
	"Romania": "RO",
	"Bulgaria": "BG",
	"Ukraine": "UA",
	"Montenegro": "ME",
	"North Macedonia": "MK",
	"Albania": "AL",
	"Kosovo": "XK",
}


def country_code(country: str | None) -> str:
	"""Two-letter code for a country name; unknown names use their first two letters."""
	if not country:
		return ""
	return COUNTRY_CODES.get(country) or country[:2].upper()
