from datetime import date

from conftest import FakeQueryService, FakeSiteLookup
from gaimport.core.aggregation import NOT_SET_LABEL
from gaimport.core.datatable import Record
from gaimport.importers.events import EventsImporter

DAY = date(2019, 3, 14)


def _responses():
    return {
        ("ga:eventCategory", "ga:eventAction"): [
            {"ga:eventCategory": "video", "ga:eventAction": "play", "nb_events": 8, "nb_visits": 3},
            {"ga:eventCategory": "video", "ga:eventAction": "pause", "nb_events": 2, "nb_visits": 1},
            {"ga:eventCategory": "form", "ga:eventAction": "play", "nb_events": 1, "nb_visits": 1},
        ],
        ("ga:eventCategory", "ga:eventLabel"): [
            {"ga:eventCategory": "video", "ga:eventLabel": "(not set)", "nb_events": 10},
        ],
    }


def _import(sink, settings):
    EventsImporter(FakeQueryService(_responses()), 1, sink, FakeSiteLookup(), settings).import_records(DAY)


def test_writes_all_six_orientations(sink, test_settings):
    _import(sink, test_settings)

    assert set(sink.blobs) == {
        "Events_category_action",
        "Events_action_category",
        "Events_category_name",
        "Events_name_category",
        "Events_action_name",
        "Events_name_action",
    }


def test_forward_and_reverse_records_share_totals(sink, test_settings):
    _import(sink, test_settings)

    forward = Record.unserialize(sink.blobs["Events_category_action"])
    reverse = Record.unserialize(sink.blobs["Events_action_category"])

    assert forward.get_row("video").get_column("nb_events") == 10
    assert forward.get_row("video").subtable.get_row("play").get_column("nb_events") == 8
    assert reverse.get_row("play").get_column("nb_events") == 9
    assert reverse.get_row("play").subtable.get_row("form").get_column("nb_visits") == 1


def test_not_set_values_get_sentinel_label(sink, test_settings):
    _import(sink, test_settings)

    by_name = Record.unserialize(sink.blobs["Events_name_category"])
    assert by_name.get_row(NOT_SET_LABEL).get_column("nb_events") == 10


def test_empty_pair_still_writes_tagged_empty_record(sink, test_settings):
    _import(sink, test_settings)

    record = Record.unserialize(sink.blobs["Events_action_name"])
    assert len(record) == 0
    assert record.metadata["imported_from_external_source"] is True
