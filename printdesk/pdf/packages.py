from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from printdesk.data.models import Document, LineItem


def distribute(total: int, count: int) -> List[int]:
    """Split total pieces over count packages as evenly as possible.

    The package count is clamped to [1, total] so no package is empty; the
    first `total % count` packages carry one extra piece.
    """
    if total < 1:
        raise ValueError(f"total quantity must be positive, got {total}")
    count = min(max(1, count), total)
    base, remainder = divmod(total, count)
    return [base + 1 if i < remainder else base for i in range(count)]


def edit_pieces(pieces: Sequence[int], index: int, value: int, total: int) -> List[int]:
    """Apply a manual piece count to one package and rebalance onto its neighbour.

    The whole deviation from `total` goes to the next package (the first one
    when the last package was edited). Every package is clamped to at least
    one piece.
    """
    if not 0 <= index < len(pieces):
        raise IndexError(f"package index {index} out of range for {len(pieces)} packages")
    result = list(pieces)
    result[index] = max(1, int(value))
    deviation = total - sum(result)
    if deviation != 0:
        neighbour = index + 1 if index < len(result) - 1 else 0
        result[neighbour] = max(1, result[neighbour] + deviation)
    return result


@dataclass(frozen=True)
class PackageAllocation:
    pieces: Tuple[int, ...]

    @property
    def package_count(self) -> int:
        return len(self.pieces)

    @classmethod
    def default(cls, quantity: int) -> "PackageAllocation":
        return cls(pieces=(quantity,))

    @classmethod
    def even(cls, quantity: int, count: int) -> "PackageAllocation":
        return cls(pieces=tuple(distribute(quantity, count)))

    def with_piece_count(self, index: int, value: int, quantity: int) -> "PackageAllocation":
        return PackageAllocation(pieces=tuple(edit_pieces(self.pieces, index, value, quantity)))

    def is_consistent(self, quantity: int) -> bool:
        return sum(self.pieces) == quantity and all(p >= 1 for p in self.pieces)

    def fits(self, quantity: int) -> bool:
        """Usable for an item of this quantity (manual edits may leave the sum off by the clamp)."""
        return 0 < self.package_count <= quantity and all(p >= 1 for p in self.pieces)

    def to_dict(self) -> Dict[str, Any]:
        return {"packageCount": self.package_count, "piecesPerPackage": list(self.pieces)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PackageAllocation":
        pieces = data.get("piecesPerPackage")
        if not isinstance(pieces, list) or not pieces:
            raise ValueError(f"Malformed package allocation: {data!r}")
        return cls(pieces=tuple(int(p) for p in pieces))


@dataclass(frozen=True)
class ShippingLabel:
    """One physical package of one line item, as printed in a label cell."""

    item: LineItem
    document: Document
    pieces: int
    package_number: int
    total_packages: int

    @property
    def weight_per_piece(self) -> Decimal:
        return self.item.catalog.weight if self.item.catalog else Decimal("0")

    @property
    def package_weight(self) -> Decimal:
        return self.weight_per_piece * self.pieces


def expand_labels(
    doc: Document,
    allocations: Optional[Mapping[str, PackageAllocation]] = None,
) -> List[ShippingLabel]:
    """One label per package entry, in item order then package order."""
    allocations = allocations or {}
    labels: List[ShippingLabel] = []
    for item in doc.items:
        alloc = allocations.get(item.key)
        if alloc is None or not alloc.fits(item.quantity):
            alloc = PackageAllocation.default(item.quantity)
        for n, pieces in enumerate(alloc.pieces, start=1):
            labels.append(
                ShippingLabel(
                    item=item,
                    document=doc,
                    pieces=pieces,
                    package_number=n,
                    total_packages=alloc.package_count,
                )
            )
    return labels
