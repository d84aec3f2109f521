"""Unit tests for removal outcome normalization."""

from __future__ import annotations

import pytest
from bson import ObjectId

from orm_adapter_mongo import AdapterError
from orm_adapter_mongo.results import Removal, normalize_removal

OID = "507f1f77bcf86cd799439011"


def test_removal_with_ids() -> None:
    outcome = Removal(ids=[ObjectId(OID), "custom"], deleted_count=2)
    assert normalize_removal(outcome) == [{"id": OID}, {"id": "custom"}]


def test_empty_removal() -> None:
    assert normalize_removal(Removal()) == []


def test_nothing_removed() -> None:
    assert normalize_removal(None) == []


def test_single_document() -> None:
    assert normalize_removal({"_id": ObjectId(OID), "name": "a"}) == [{"id": OID}]


def test_sequence_of_documents_and_ids() -> None:
    outcome = [{"_id": ObjectId(OID)}, ObjectId(OID)]
    assert normalize_removal(outcome) == [{"id": OID}, {"id": OID}]
    assert normalize_removal(("a", "b")) == [{"id": "a"}, {"id": "b"}]


def test_zero_count_removed_nothing() -> None:
    assert normalize_removal(0) == []


def test_nonzero_count_carries_no_ids() -> None:
    with pytest.raises(AdapterError, match="carries no ids"):
        normalize_removal(3)


@pytest.mark.parametrize("outcome", [True, False, 1.5, "a"])
def test_unsupported_outcome(outcome) -> None:
    with pytest.raises(TypeError):
        normalize_removal(outcome)
