"""Tests for the trip parameters store."""

import datetime as dt

import pytest
from conftest import GATWICK, HEATHROW, KINGS_CROSS, WESTMINSTER, make_vehicle

from ridebook.config import TripLimitsConfig
from ridebook.stores.trip import TripParametersStore, clamp, parse_date, parse_time


@pytest.fixture
def store():
    return TripParametersStore(limits=TripLimitsConfig())


class TestInitialState:
    def test_documented_initial_values(self, store):
        params = store.params
        assert params.pickup is None
        assert params.dropoff is None
        assert params.stops == []
        assert params.date is None
        assert params.time is None
        assert params.passengers == 1
        assert params.checked_luggage == 0
        assert params.hand_luggage == 0
        assert params.selected_vehicle is None
        assert store.version == 0


class TestClamping:
    @pytest.mark.parametrize(
        "requested,expected", [(0, 1), (-3, 1), (1, 1), (5, 5), (8, 8), (20, 8)]
    )
    def test_passengers_clamped(self, store, requested, expected):
        store.set_passengers(requested)
        assert store.params.passengers == expected

    def test_luggage_clamped(self, store):
        store.set_checked_luggage(-1)
        store.set_hand_luggage(99)
        assert store.params.checked_luggage == 0
        assert store.params.hand_luggage == 8

    def test_custom_limits(self):
        store = TripParametersStore(limits=TripLimitsConfig(max_passengers=16))
        store.set_passengers(12)
        assert store.params.passengers == 12

    def test_clamp_helper(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2


class TestStops:
    def test_add_keeps_order(self, store):
        store.add_stop(HEATHROW)
        store.add_stop(KINGS_CROSS)
        assert store.stops == (HEATHROW, KINGS_CROSS)

    def test_remove_shifts_later_stops_down(self, store):
        for stop in (HEATHROW, KINGS_CROSS, GATWICK, WESTMINSTER):
            store.add_stop(stop)

        store.remove_stop(1)

        assert store.stops == (HEATHROW, GATWICK, WESTMINSTER)

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_remove_out_of_bounds_is_noop(self, store, index):
        store.add_stop(HEATHROW)
        store.add_stop(KINGS_CROSS)
        version = store.version

        store.remove_stop(index)

        assert store.stops == (HEATHROW, KINGS_CROSS)
        assert store.version == version

    def test_update_replaces_in_place(self, store):
        store.add_stop(HEATHROW)
        store.add_stop(KINGS_CROSS)
        store.update_stop(0, GATWICK)
        assert store.stops == (GATWICK, KINGS_CROSS)

    def test_update_out_of_range_appends(self, store):
        store.add_stop(HEATHROW)
        store.update_stop(5, GATWICK)
        assert store.stops == (HEATHROW, GATWICK)


class TestSchedule:
    def test_set_date_accepts_iso_string(self, store):
        store.set_date("2030-05-17")
        assert store.params.date == dt.date(2030, 5, 17)

    def test_set_time_clamps_parts(self, store):
        store.set_time("25:75")
        assert store.params.time == dt.time(23, 59)

    def test_unparseable_time_leaves_field_absent(self, store, caplog):
        store.set_time("14:30")
        store.set_time("soon")
        assert store.params.time is None
        assert "Unparseable pickup time" in caplog.text

    def test_parse_helpers(self):
        assert parse_date(dt.datetime(2030, 1, 2, 9, 30)) == dt.date(2030, 1, 2)
        assert parse_date("not a date") is None
        assert parse_time(dt.time(8, 15)) == dt.time(8, 15)
        assert parse_time("7") is None
        assert parse_time("07:05") == dt.time(7, 5)


class TestVersion:
    def test_every_fare_relevant_setter_increments(self, store):
        setters = [
            lambda: store.set_pickup_location(HEATHROW),
            lambda: store.set_dropoff_location(KINGS_CROSS),
            lambda: store.add_stop(GATWICK),
            lambda: store.update_stop(0, WESTMINSTER),
            lambda: store.remove_stop(0),
            lambda: store.set_date("2030-05-17"),
            lambda: store.set_time("10:00"),
            lambda: store.set_passengers(3),
            lambda: store.set_checked_luggage(2),
            lambda: store.set_hand_luggage(1),
        ]
        seen = [store.version]
        for setter in setters:
            setter()
            assert store.version > seen[-1]
            seen.append(store.version)

    def test_same_value_still_increments(self, store):
        store.set_passengers(2)
        version = store.version
        store.set_passengers(2)
        assert store.version == version + 1

    def test_vehicle_selection_does_not_increment(self, store):
        version = store.version
        store.set_selected_vehicle(make_vehicle("saloon"))
        assert store.version == version

    def test_reset_increments_and_restores_initial_values(self, store):
        store.set_pickup_location(HEATHROW)
        store.set_passengers(4)
        version = store.version

        store.reset()

        assert store.params.pickup is None
        assert store.params.passengers == 1
        assert store.version > version


class TestSnapshot:
    def test_snapshot_is_independent(self, store):
        store.add_stop(HEATHROW)
        snapshot = store.snapshot()

        store.add_stop(KINGS_CROSS)
        store.set_passengers(6)

        assert snapshot.stops == [HEATHROW]
        assert snapshot.passengers == 1

    def test_restore_reclamps_and_keeps_version_monotonic(self, store):
        snapshot = store.snapshot()
        snapshot.passengers = 40
        store.set_passengers(2)

        store.restore(snapshot, version=0)

        assert store.params.passengers == 8
        assert store.version >= 1
