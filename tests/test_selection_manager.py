import random
import threading

import pytest

from conftest import IDENTIFIER, FakeFeatureService, make_feature
from engine.selection import MAX_SELECTED, PALETTE, SelectionManager
from parcel_history import (
    CapacityError,
    EmptyResultError,
    TransportError,
    list_versions,
)

GREEN, BLUE = PALETTE


def _listing(service):
    return list_versions(IDENTIFIER, fetch=service)


def test_two_versions_get_green_then_blue(service):
    manager = SelectionManager(fetch=service)
    active, middle, oldest = _listing(service)

    first = manager.toggle(middle)
    second = manager.toggle(oldest)

    assert (first.action, first.color) == ("added", GREEN)
    assert (second.action, second.color) == ("added", BLUE)
    assert manager.keys() == [middle.key, oldest.key]
    assert [r.color for r in manager.store.records()] == [GREEN, BLUE]


def test_removing_first_recolors_remaining_to_green(service):
    manager = SelectionManager(fetch=service)
    active, middle, _ = _listing(service)
    manager.toggle(active)
    manager.toggle(middle)

    result = manager.toggle(active)

    assert result.action == "removed"
    assert manager.keys() == [middle.key]
    assert manager.colors() == {middle.key: GREEN}
    assert manager.store.get(middle.key).color == GREEN
    assert manager.store.get(active.key) is None


def test_third_selection_is_rejected(service):
    manager = SelectionManager(fetch=service)
    active, middle, oldest = _listing(service)
    manager.toggle(active)
    manager.toggle(middle)
    calls_before = len(service.calls)

    with pytest.raises(CapacityError):
        manager.toggle(oldest)

    assert manager.keys() == [active.key, middle.key]
    assert len(service.calls) == calls_before


def test_toggle_twice_restores_previous_state(service):
    manager = SelectionManager(fetch=service)
    active, middle, _ = _listing(service)
    manager.toggle(active)
    before = manager.snapshot()

    manager.toggle(middle)
    manager.toggle(middle)

    assert manager.snapshot() == before
    assert len(manager.store) == 1


def test_add_fits_view_to_new_geometry(service):
    manager = SelectionManager(fetch=service)
    active, _, oldest = _listing(service)
    manager.toggle(active)

    result = manager.toggle(oldest)

    assert result.fit.extent == (540000.0, 6500000.0, 540100.0, 6500100.0)
    assert result.fit.padding == (40, 40, 200, 40)
    assert result.fit.max_zoom == 17
    assert manager.fit_all().extent == (539980.0, 6499950.0, 540120.0, 6500200.0)


def test_drawer_holds_every_version_of_latest_identifier(service):
    manager = SelectionManager(fetch=service)
    active, _, _ = _listing(service)

    manager.toggle(active)

    drawer = manager.drawer
    assert drawer.open is True
    assert drawer.identifier == IDENTIFIER
    assert [r.valid_from for r in drawer.rows] == ["2021-06-01", "2018-05-10", "2012-03-01"]
    assert "id" not in drawer.columns
    assert "kirje_muudetud" not in drawer.columns
    assert "pindala" in drawer.columns


def test_drawer_closes_only_when_no_selection_shares_identifier(service):
    manager = SelectionManager(fetch=service)
    active, middle, _ = _listing(service)
    manager.toggle(active)
    manager.toggle(middle)

    manager.toggle(active)
    assert manager.drawer.identifier == IDENTIFIER

    manager.toggle(middle)
    assert manager.drawer.identifier is None
    assert manager.drawer.rows == []
    assert manager.drawer.open is False


def test_drawer_of_other_identifier_survives_removal(service):
    manager = SelectionManager(fetch=service)
    active, _, _ = _listing(service)
    (neighbour,) = list_versions("79501:027:0012", fetch=service)
    manager.toggle(active)
    manager.toggle(neighbour)
    assert manager.drawer.identifier == "79501:027:0012"

    manager.toggle(active)

    assert manager.drawer.identifier == "79501:027:0012"


def test_missing_geometry_leaves_selection_unchanged(service):
    manager = SelectionManager(fetch=service)
    active, _, _ = _listing(service)
    manager.toggle(active)
    ghost = active.__class__(identifier=IDENTIFIER, valid_from="1999-01-01", valid_to="2000-01-01")

    with pytest.raises(EmptyResultError):
        manager.toggle(ghost)

    assert manager.keys() == [active.key]
    assert len(service.calls_of("details")) == 1


def test_geometry_fetch_failure_skips_detail_fetch(service):
    manager = SelectionManager(fetch=service)
    active, _, _ = _listing(service)
    service.fail_when = lambda query: "kehtiv_alates = '" in query.cql_filter

    with pytest.raises(TransportError):
        manager.toggle(active)

    assert manager.keys() == []
    assert len(manager.store) == 0
    assert service.calls_of("details") == []


def test_detail_fetch_failure_is_not_a_partial_add(service):
    manager = SelectionManager(fetch=service)
    active, middle, _ = _listing(service)
    manager.toggle(middle)
    before = manager.snapshot()
    service.fail_when = lambda query: query.param("maxFeatures") == "200" and query.param("propertyName") is None

    with pytest.raises(TransportError):
        manager.toggle(active)

    assert manager.snapshot() == before
    assert manager.store.get(active.key) is None


def test_clear_is_idempotent(service):
    manager = SelectionManager(fetch=service)
    active, middle, _ = _listing(service)
    manager.toggle(active)
    manager.toggle(middle)

    manager.clear()
    manager.clear()

    assert manager.keys() == []
    assert manager.colors() == {}
    assert manager.store.union_extent() is None
    assert manager.drawer.open is False
    assert manager.fit_all() is None


def test_drawer_can_be_hidden_without_losing_rows(service):
    manager = SelectionManager(fetch=service)
    active, _, _ = _listing(service)
    manager.toggle(active)

    manager.set_drawer_open(False)

    assert manager.drawer.open is False
    assert len(manager.drawer.rows) == 3


def test_random_toggles_keep_invariants():
    features = [
        make_feature(IDENTIFIER, f"20{10 + i}-01-01", None if i == 5 else f"20{11 + i}-01-01")
        for i in range(6)
    ]
    service = FakeFeatureService(features)
    manager = SelectionManager(fetch=service)
    records = list_versions(IDENTIFIER, fetch=service)
    rng = random.Random(3301)

    for _ in range(200):
        try:
            manager.toggle(rng.choice(records))
        except CapacityError:
            assert len(manager.keys()) == 2
        keys = manager.keys()
        assert len(keys) <= 2
        assert list(manager.colors().values()) == list(PALETTE[: len(keys)])
        assert {r.key for r in manager.store.records()} == set(keys)
        for record in manager.store.records():
            assert record.color == manager.colors()[record.key]


def test_readers_do_not_wait_for_an_inflight_fetch(service):
    entered, release = threading.Event(), threading.Event()

    def slow_fetch(query):
        entered.set()
        release.wait(5)
        return service(query)

    manager = SelectionManager(fetch=slow_fetch)
    active, _, _ = _listing(service)
    worker = threading.Thread(target=manager.toggle, args=(active,))
    worker.start()
    assert entered.wait(5)

    assert manager.snapshot()["selected"] == []
    assert manager.feature_collection()["features"] == []
    assert manager.fit_all() is None

    release.set()
    worker.join(5)
    assert [s["key"] for s in manager.snapshot()["selected"]] == [active.key.token]


def test_snapshots_stay_consistent_while_toggling(service):
    manager = SelectionManager(fetch=service)
    active, middle, _ = _listing(service)
    errors = []

    def churn():
        try:
            for _ in range(100):
                manager.toggle(active)
                manager.toggle(middle)
        except Exception as exc:  # surfaced by the assertion below
            errors.append(exc)

    worker = threading.Thread(target=churn)
    worker.start()
    while worker.is_alive():
        snapshot = manager.snapshot()
        colors = [s["color"] for s in snapshot["selected"]]
        assert colors == list(PALETTE[: len(colors)])
        collection = manager.feature_collection()
        assert len(collection["features"]) <= MAX_SELECTED
    worker.join()

    assert errors == []
