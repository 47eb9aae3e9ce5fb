import json

import pytest

from api.services import storage


@pytest.fixture(autouse=True)
def storage_root(tmp_path, monkeypatch):
    monkeypatch.setattr(storage, "STORAGE_ROOT", tmp_path)
    return tmp_path


def test_default_view_when_nothing_saved():
    assert storage.load_view() == {"center": [538000.0, 6500000.0], "zoom": 6.0}


def test_saved_view_is_restored(storage_root):
    path = storage.save_view([540123.5, 6501000.0], 14)

    assert path == storage_root / "mapView3301.json"
    assert storage.load_view() == {"center": [540123.5, 6501000.0], "zoom": 14.0}


def test_corrupt_file_falls_back_to_default(storage_root):
    (storage_root / "mapView3301.json").write_text("{not json")
    assert storage.load_view() == storage.default_view()


def test_malformed_center_falls_back_to_default(storage_root):
    (storage_root / "mapView3301.json").write_text(json.dumps({"center": [1.0], "zoom": 3}))
    assert storage.load_view() == storage.default_view()


def test_incomplete_view_is_not_saved(storage_root):
    assert storage.save_view(None, 10) is None
    assert storage.save_view([1.0, 2.0], None) is None
    assert list(storage_root.iterdir()) == []


def test_center_is_clamped_to_navigable_extent():
    assert storage.clamp_center([0.0, 0.0]) == [300000.0, 6300000.0]
    assert storage.clamp_center([900000.0, 6500000.0]) == [800000.0, 6500000.0]
    assert storage.clamp_center([540000.0, 6500000.0]) == [540000.0, 6500000.0]


def test_out_of_extent_file_is_pulled_back(storage_root):
    (storage_root / "mapView3301.json").write_text(json.dumps({"center": [1.0, 2.0], "zoom": 8}))
    assert storage.load_view()["center"] == [300000.0, 6300000.0]
