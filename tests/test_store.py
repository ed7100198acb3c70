"""Tests for the snapshot codec and file store."""

import json
import logging

import pytest

from gymticks.models import INT64_MAX, Snapshot, TickKind
from gymticks.store import (
    SnapshotError,
    SnapshotStore,
    StoreWriteError,
    export_json,
    import_json,
    snapshot_from_dict,
    snapshot_to_dict,
)
from gymticks.ordered import OrderedMap
from gymticks.taxonomy import Taxonomy, TaxonomyEntry


class TestCodec:
    def test_round_trip(self, populated):
        restored = import_json(export_json(populated))
        assert restored == populated
        assert restored.routes.keys() == populated.routes.keys()

    def test_wire_shape(self, populated):
        data = snapshot_to_dict(populated)
        assert set(data) == {"routes", "settings"}
        slab = data["routes"]["r-slab"]
        assert [t["kind"] for t in slab["ticks"]] == [1, 1, 0]
        assert slab["retired"] is False
        assert data["settings"]["sections"]["AB2"] == {"group": "A", "label": "MAP", "sort": 2}

    def test_legacy_snapshot(self):
        data = {
            "routes": {
                "abc": {
                    "title": "old",
                    "completed": True,
                    "color": "red",
                    "section": "AB1",
                    "grade": "5",
                    "ticks": [{"typ": "Attempt", "timestamp": 10}, {"typ": "Ascent", "timestamp": 20}],
                }
            }
        }
        snapshot = snapshot_from_dict(data)
        route = snapshot.routes.get("abc")
        assert [t.kind for t in route.ticks] == [TickKind.ATTEMPT, TickKind.ASCENT]
        assert route.retired is False
        assert snapshot.taxonomy == Taxonomy()

    def test_64_bit_timestamps(self):
        data = {"routes": {"a": {"title": "t", "color": "c", "section": "s", "grade": "g",
                                 "ticks": [{"kind": 0, "timestamp": INT64_MAX}], "retired": False}}}
        assert snapshot_from_dict(data).routes.get("a").ticks[0].timestamp == INT64_MAX
        data["routes"]["a"]["ticks"][0]["timestamp"] = INT64_MAX + 1
        with pytest.raises(SnapshotError):
            snapshot_from_dict(data)

    def test_custom_catalogs(self):
        data = {
            "routes": {},
            "settings": {
                "colors": {"teal": {"group": "A", "label": "teal", "sort": 1}},
                "sections": {},
                "grades": {"V9": {"group": "B", "label": "V9", "sort": 7}},
            },
        }
        taxonomy = snapshot_from_dict(data).taxonomy
        assert taxonomy.colors == OrderedMap([("teal", TaxonomyEntry("A", "teal", 1))])
        assert len(taxonomy.sections) == 0

    @pytest.mark.parametrize(
        "text",
        [
            "not json",
            "[]",
            '{"settings": {}}',
            '{"routes": {"a": {"title": 1, "color": "c", "section": "s", "grade": "g"}}}',
            '{"routes": {"a": {"title": "t", "color": "c", "section": "s", "grade": "g", "ticks": [{"kind": 7, "timestamp": 1}]}}}',
            '{"routes": {"a": {"title": "t", "color": "c", "section": "s", "grade": "g", "ticks": [{"kind": 0, "timestamp": 1.5}]}}}',
            '{"routes": {}, "settings": {"colors": {}, "sections": {}}}',
        ],
    )
    def test_rejects_incompatible(self, text):
        with pytest.raises(SnapshotError):
            import_json(text)

    @pytest.mark.parametrize("text", ["9" * 5001, "[" * 200_000], ids=["huge-integer", "deep-nesting"])
    def test_rejects_pathological_json(self, text):
        with pytest.raises(SnapshotError):
            import_json(text)


class TestSnapshotStore:
    def test_missing_file_gives_defaults(self, store):
        assert store.load() == Snapshot()

    def test_save_then_load(self, store, populated):
        store.save(populated)
        assert store.load() == populated
        assert json.loads(store.path.read_text())["routes"]["r-roof"]["section"] == "ROF"

    def test_corrupt_file_gives_defaults(self, store, caplog):
        store.path.write_text("{truncated")
        with caplog.at_level(logging.WARNING, logger="gymticks.store"):
            assert store.load() == Snapshot()
        assert "Discarding unreadable snapshot" in caplog.text

    @pytest.mark.parametrize(
        "content",
        [b"\xff\xfe\x00garbage", b"9" * 5001, b"[" * 200_000],
        ids=["not-utf8", "huge-integer", "deep-nesting"],
    )
    def test_undecodable_file_gives_defaults(self, store, content):
        store.path.write_bytes(content)
        assert store.load() == Snapshot()

    def test_failed_write_raises(self, tmp_path, populated):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = SnapshotStore(blocker / "gymticks.json")
        with pytest.raises(StoreWriteError):
            store.save(populated)
