import pytest

from award_tracker.fields import (
    AWARD_FIELDS,
    REQUIREMENT_FIELDS,
    FieldSpec,
    map_award,
    map_requirement,
    resolve_field,
    to_columns,
    with_primary_columns,
)


@pytest.mark.parametrize("column", ["url", "URL", "Url"])
def test_every_url_casing_resolves_to_the_same_value(column):
    award = map_award({"id": "rec1", "fields": {"name": "Hugo Award", column: "https://thehugoawards.org"}})
    assert award.url == "https://thehugoawards.org"


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "Hugo Award", "status": "submitted", "notes": "n", "deadline": "March"},
        {"Name": "Hugo Award", "Status": "submitted", "Notes": "n", "Deadline": "March"},
    ],
)
def test_award_casings_are_equivalent(fields):
    award = map_award({"id": "rec1", "fields": fields})
    assert (award.name, award.status, award.notes, award.deadline) == ("Hugo Award", "submitted", "n", "March")


def test_primary_column_wins_over_alternates():
    spec = FieldSpec("name", ("name", "Name"))
    assert resolve_field({"name": "lower", "Name": "Upper"}, spec) == "lower"


def test_empty_primary_falls_through_to_alternate():
    spec = FieldSpec("name", ("name", "Name"))
    assert resolve_field({"name": "", "Name": "Upper"}, spec) == "Upper"


def test_missing_award_fields_use_defaults():
    award = map_award({"id": "rec1", "fields": {}})
    assert award.name == ""
    assert award.url == ""
    assert award.notes == ""
    assert award.deadline == ""
    assert award.status == "researching"
    assert award.requirements == []


def test_missing_fields_key_is_tolerated():
    req = map_requirement({"id": "rec9"})
    assert req.model_dump(by_alias=True) == {"id": "rec9", "awardId": "", "text": "", "done": False}


@pytest.mark.parametrize("column", ["awardId", "AwardId", "AwardID"])
def test_requirement_award_id_casings(column):
    req = map_requirement({"id": "rec2", "fields": {column: "rec1", "Text": "Send 3 copies"}})
    assert req.award_id == "rec1"
    assert req.text == "Send 3 copies"


def test_unchecked_checkbox_is_false_and_checked_is_true():
    assert map_requirement({"id": "r", "fields": {}}).done is False
    assert map_requirement({"id": "r", "fields": {"Done": True}}).done is True
    assert map_requirement({"id": "r", "fields": {"done": True}}).done is True


def test_linked_record_award_id_uses_first_id():
    req = map_requirement({"id": "r", "fields": {"awardId": ["recA", "recB"]}})
    assert req.award_id == "recA"


def test_to_columns_only_emits_supplied_keys():
    assert to_columns({"name": "X"}, AWARD_FIELDS) == {"name": "X"}
    assert to_columns({}, AWARD_FIELDS) == {}


def test_primary_override_writes_to_configured_column_and_keeps_alternates():
    specs = with_primary_columns(AWARD_FIELDS, {"name": "Name"})
    name_spec = next(s for s in specs if s.name == "name")
    assert name_spec.columns == ("Name", "name")
    assert to_columns({"name": "X", "status": "won"}, specs) == {"Name": "X", "status": "won"}
    assert map_award({"id": "r", "fields": {"name": "legacy"}}, specs).name == "legacy"


def test_override_for_unknown_field_is_ignored():
    assert with_primary_columns(REQUIREMENT_FIELDS, {"nope": "Nope"}) == REQUIREMENT_FIELDS


def test_empty_lookup_cell_falls_through_to_alternate_or_default():
    spec = FieldSpec("name", ("name", "Name"))
    assert resolve_field({"name": [], "Name": "Upper"}, spec) == "Upper"
    assert map_award({"id": "r", "fields": {"name": []}}).name == ""
    assert map_requirement({"id": "r", "fields": {"awardId": [], "AwardId": "recB"}}).award_id == "recB"
