from datetime import datetime, timezone

import pytest

from grouptrips.modules.drafts import DraftValidationError, TripDraft, parse_instant

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_create_normalises_form_values():
    draft = TripDraft.create(
        title="  Weekend in Lisbon ",
        start_at="2025-06-01T09:00:00Z",
        group_label="   ",
        description=" Pastéis de nata ",
    )

    assert draft.title == "Weekend in Lisbon"
    assert draft.start_at == datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)
    assert draft.group_label is None
    assert draft.description == "Pastéis de nata"
    assert draft.end_at is None


def test_naive_timestamps_are_read_as_utc():
    assert parse_instant("2025-06-01T09:00:00") == datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc)


def test_blank_title_is_rejected():
    with pytest.raises(DraftValidationError) as excinfo:
        TripDraft.create(title="   ", start_at="2025-06-01T09:00:00Z")

    assert str(excinfo.value) == "Please enter a trip name"
    assert excinfo.value.field == "title"


def test_missing_departure_is_rejected():
    with pytest.raises(DraftValidationError, match="Please select a departure date"):
        TripDraft.create(title="Lisbon", start_at="")


def test_return_before_departure_is_rejected():
    with pytest.raises(DraftValidationError, match="Return date must be after departure date"):
        TripDraft.create(
            title="Lisbon",
            start_at="2025-06-05T09:00:00Z",
            end_at="2025-06-01T09:00:00Z",
        )


def test_departure_in_the_past_only_fails_at_submission():
    draft = TripDraft.create(title="Lisbon", start_at="2025-04-01T09:00:00Z")

    draft.validate()
    with pytest.raises(DraftValidationError) as excinfo:
        draft.validate_for_submission(NOW)

    assert excinfo.value.salvaged["title"] == "Lisbon"


def test_from_mapping_accepts_gateway_metadata_names():
    draft = TripDraft.from_mapping(
        {
            "tripName": "Weekend in Lisbon",
            "groupName": "Uni friends",
            "description": "",
            "departureTime": "2025-06-01T09:00:00+00:00",
            "returnTime": "2025-06-03T18:00:00+00:00",
            "userId": "user-1",
        }
    )

    assert draft.title == "Weekend in Lisbon"
    assert draft.group_label == "Uni friends"
    assert draft.description is None
    assert draft.end_at == datetime(2025, 6, 3, 18, 0, tzinfo=timezone.utc)


def test_from_mapping_salvages_readable_fields():
    with pytest.raises(DraftValidationError) as excinfo:
        TripDraft.from_mapping({"title": "Lisbon", "group_label": "Crew", "start_at": "not a date"})

    assert str(excinfo.value) == "Invalid departure date"
    assert excinfo.value.salvaged == {"title": "Lisbon", "group_label": "Crew"}


def test_to_mapping_round_trips_through_from_mapping():
    draft = TripDraft.create(
        title="Lisbon",
        start_at="2025-06-01T09:00:00Z",
        end_at="2025-06-02T09:00:00Z",
        group_label="Crew",
    )

    assert TripDraft.from_mapping(draft.to_mapping()) == draft
