# (c) Copyright Datacraft, 2026
"""Tests for the grouping engine."""
from docportal.core.features.classifier import DocumentRecord
from docportal.core.features.grouping import NULL_GROUP, group_documents
from docportal.core.features.grouping.engine import (
    composite_key,
    order_bucket,
    order_by_revision,
    sort_primary_keys,
)


def _drawing(**kwargs):
    return DocumentRecord(document_type="Drawing", **kwargs)


def test_end_to_end_grouping_by_resort():
    """Two revisions of one drawing share a sub-group, newest first."""
    records = [
        _drawing(resort="A", drawing_number="D-2", revision_number="1"),
        _drawing(resort="A", drawing_number="D-2", revision_number="3"),
        _drawing(resort="B", drawing_number="D-10"),
    ]

    grouped = group_documents(records, "Resort")

    assert grouped.partition == {"A": [0, 1], "B": [2]}
    assert grouped.primary_keys == ["A", "B"]
    assert grouped.bucket("A") == [1, 0]
    assert list(grouped.flatten()) == [1, 0, 2]


def test_every_record_lands_in_exactly_one_bucket():
    records = [
        DocumentRecord(resort="A"),
        DocumentRecord(resort=None),
        DocumentRecord(resort="C"),
        DocumentRecord(resort="A", title="x"),
    ]

    grouped = group_documents(records, "resort")
    indices = sorted(i for key in grouped.primary_keys for i in grouped.bucket(key))

    assert indices == [0, 1, 2, 3]
    assert len(grouped) == 4


def test_null_bucket_sorts_last_even_against_later_letters():
    """The null bucket goes last however late the real values sort."""
    records = [
        DocumentRecord(building=None),
        DocumentRecord(building="zz"),
        DocumentRecord(building="Alpha"),
    ]

    grouped = group_documents(records, "Building")

    assert grouped.primary_keys == ["Alpha", "zz", NULL_GROUP]
    assert sort_primary_keys([NULL_GROUP, "zzz", "a"]) == ["a", "zzz", NULL_GROUP]


def test_unknown_grouping_field_keeps_all_records():
    records = [DocumentRecord(resort="A"), DocumentRecord(resort="B")]

    grouped = group_documents(records, "Colour")

    assert grouped.primary_keys == [NULL_GROUP]
    assert sorted(grouped.bucket(NULL_GROUP)) == [0, 1]


def test_value_spelled_like_null_keeps_its_own_bucket():
    records = [
        DocumentRecord(resort="znull"),
        DocumentRecord(resort=None),
        DocumentRecord(resort="zzz"),
        DocumentRecord(resort="null"),
    ]

    grouped = group_documents(records, "Resort")

    assert grouped.primary_keys == ["null", "znull", "zzz", NULL_GROUP]
    assert grouped.bucket("znull") == [0]
    assert grouped.bucket(NULL_GROUP) == [1]
    assert list(grouped.to_dict()) == ["null", "znull", "zzz"]
    assert list(grouped.null_group().values()) == [[1]]


def test_composite_key_depends_on_document_type():
    drawing = _drawing(business="P", resort="A", drawing_area="Club", drawing_number="D-1")
    report = DocumentRecord(resort="A", document_type="Report", title="Audit")

    assert composite_key(drawing) == "P-A-null-Club-D-1-null"
    assert composite_key(report) == "null-A-null-null-Report-Audit-null"


def test_bucket_order_is_natural_then_multi_key():
    records = [
        _drawing(resort="A", drawing_area="West", drawing_number="D-10"),
        _drawing(resort="A", drawing_area="East", drawing_number="D-10"),
        _drawing(resort="A", drawing_area="East", drawing_number="D-2"),
        _drawing(resort="A", drawing_area=None, drawing_number="D-1"),
    ]

    ordered = order_bucket(records, [0, 1, 2, 3])

    assert ordered == [2, 1, 0, 3]


def test_revisions_sort_descending_with_null_last():
    records = [
        DocumentRecord(revision_number=None),
        DocumentRecord(revision_number="2"),
        DocumentRecord(revision_number="10"),
        DocumentRecord(revision_number="1"),
    ]

    assert order_by_revision(records, [0, 1, 2, 3]) == [2, 1, 3, 0]


def test_grouping_by_display_label():
    records = [
        _drawing(drawing_area="Pool", drawing_number="D-1"),
        _drawing(drawing_area="Clubhouse", drawing_number="D-1"),
    ]

    grouped = group_documents(records, "Drawing Area")

    assert grouped.primary_keys == ["Clubhouse", "Pool"]
    assert grouped.to_dict()["Pool"] == {"null-null-null-Pool-D-1-null": [0]}


def test_regrouping_returns_a_fresh_structure():
    records = [DocumentRecord(resort="A", building="X")]

    first = group_documents(records, "Resort")
    second = group_documents(records, "Building")

    assert first.primary_keys == ["A"]
    assert second.primary_keys == ["X"]
    assert first is not second
