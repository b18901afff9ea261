from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from conftest import make_document, make_items
from printdesk.core.state import AllocationStore
from printdesk.pdf.packages import PackageAllocation, distribute, edit_pieces, expand_labels


def test_distribute_spreads_remainder_over_first_packages() -> None:
    assert distribute(10, 3) == [4, 3, 3]
    assert distribute(9, 3) == [3, 3, 3]
    assert distribute(7, 1) == [7]


def test_distribute_clamps_package_count() -> None:
    assert distribute(1, 5) == [1]
    assert distribute(5, 0) == [5]
    with pytest.raises(ValueError):
        distribute(0, 1)


def test_edit_conserves_total_when_neighbour_can_absorb() -> None:
    assert edit_pieces([4, 3, 3], 0, 5, 10) == [5, 2, 3]


def test_edit_clamps_neighbour_to_one_piece() -> None:
    assert edit_pieces([4, 3, 3], 0, 7, 10) == [7, 1, 3]


def test_edit_of_last_package_rebalances_first() -> None:
    assert edit_pieces([4, 3, 3], 2, 1, 10) == [6, 3, 1]


def test_edit_never_sets_a_package_below_one() -> None:
    assert edit_pieces([5, 5], 0, 0, 10) == [1, 9]


def test_edit_rejects_unknown_package() -> None:
    with pytest.raises(IndexError):
        edit_pieces([4, 3, 3], 3, 1, 10)


def test_allocation_dict_shape() -> None:
    alloc = PackageAllocation.even(10, 3)
    assert alloc.to_dict() == {"packageCount": 3, "piecesPerPackage": [4, 3, 3]}
    assert PackageAllocation.from_dict(alloc.to_dict()) == alloc
    with pytest.raises(ValueError):
        PackageAllocation.from_dict({"packageCount": 2})


def test_allocation_fit_checks() -> None:
    alloc = PackageAllocation((4, 3, 3))
    assert alloc.is_consistent(10)
    assert alloc.fits(10)
    assert not alloc.fits(2)
    assert PackageAllocation((7, 1, 3)).fits(10)
    assert not PackageAllocation((7, 1, 3)).is_consistent(10)


def test_expand_labels_one_per_package_in_item_order() -> None:
    doc = make_document(items=make_items(2, quantity=10, weight="0.5"))
    first, second = doc.items
    labels = expand_labels(doc, {first.key: PackageAllocation.even(10, 3)})
    assert [(lb.item.id, lb.package_number, lb.total_packages, lb.pieces) for lb in labels] == [
        ("1", 1, 3, 4),
        ("1", 2, 3, 3),
        ("1", 3, 3, 3),
        ("2", 1, 1, 10),
    ]
    assert labels[0].package_weight == Decimal("2.0")
    assert labels[3].weight_per_piece == Decimal("0.5")


def test_expand_labels_ignores_allocation_that_no_longer_fits() -> None:
    doc = make_document(items=make_items(1, quantity=2))
    labels = expand_labels(doc, {doc.items[0].key: PackageAllocation((4, 3, 3))})
    assert [lb.pieces for lb in labels] == [2]


def test_allocation_store_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "package_allocations.json"
    store = AllocationStore(path).load()
    store.set_package_count("42", "1-Bracket 1", 10, 3)
    store.edit_pieces("42", "1-Bracket 1", 10, 0, 5)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw == {"42": {"1-Bracket 1": {"packageCount": 3, "piecesPerPackage": [5, 2, 3]}}}

    reloaded = AllocationStore(path).load()
    assert reloaded.get("42", "1-Bracket 1", 10).pieces == (5, 2, 3)
    assert reloaded.for_document("missing") == {}


def test_allocation_store_falls_back_to_single_package(tmp_path: Path) -> None:
    store = AllocationStore(tmp_path / "alloc.json").load()
    store.set("42", "k", PackageAllocation((4, 3, 3)))
    assert store.get("42", "k", 2) == PackageAllocation((2,))
    assert store.get("42", "other", 6) == PackageAllocation((6,))


def test_corrupt_allocation_file_is_ignored_but_kept(tmp_path: Path) -> None:
    path = tmp_path / "alloc.json"
    path.write_text("{not json", encoding="utf-8")
    store = AllocationStore(path).load()
    assert store.for_document("42") == {}
    assert path.read_text(encoding="utf-8") == "{not json"


def test_malformed_entries_are_dropped(tmp_path: Path) -> None:
    path = tmp_path / "alloc.json"
    path.write_text(
        json.dumps({"42": {"good": {"packageCount": 2, "piecesPerPackage": [1, 1]}, "bad": {"packageCount": 2}}}),
        encoding="utf-8",
    )
    store = AllocationStore(path).load()
    assert list(store.for_document("42")) == ["good"]
