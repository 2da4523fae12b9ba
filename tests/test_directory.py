import pytest
from pydantic import ValidationError

from triage.directory import (
    DIRECTORY,
    UNREGISTERED_KEY,
    UNREGISTERED_RECORD,
    is_registered,
    list_patients,
    lookup,
    timeline_for,
)


def test_lookup_registered_patient():
    record = lookup("P001")
    assert record.patient.name == "John Carter"
    assert record.patient.label == "John Carter, 45y, Male"
    assert record.patient.registered is True
    assert [entry.time for entry in record.timeline] == ["Yesterday 14:10", "Today 08:55"]


def test_lookup_normalises_key():
    assert lookup("  p002 ").patient.name == "Sarah Wilson"
    assert is_registered("p003")


@pytest.mark.parametrize("key", [None, "", "P999", "john-carter-key", UNREGISTERED_KEY])
def test_unknown_keys_resolve_to_unregistered_sentinel(key):
    record = lookup(key)
    assert record is UNREGISTERED_RECORD
    assert record.patient.registered is False
    assert timeline_for(key) == ()
    assert not is_registered(key)


def test_directory_is_read_only():
    with pytest.raises(TypeError):
        DIRECTORY["P004"] = UNREGISTERED_RECORD  # type: ignore[index]


def test_records_are_frozen():
    record = lookup("P001")
    with pytest.raises(ValidationError):
        record.patient.name = "Someone Else"  # type: ignore[misc]


def test_list_patients_orders_directory_then_sentinel():
    rows = list_patients()
    assert [row["key"] for row in rows] == ["P001", "P002", "P003", UNREGISTERED_KEY]
    assert rows[-1]["registered"] is False
    assert rows[1]["label"] == "Sarah Wilson, 32y, Female"


def test_list_patients_without_sentinel():
    keys = [row["key"] for row in list_patients(include_unregistered=False)]
    assert UNREGISTERED_KEY not in keys
    assert len(keys) == len(DIRECTORY)
