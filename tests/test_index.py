"""Tests for the digest index."""

import pytest
from structlog.testing import capture_logs

from depindex import (
    DigestIndex,
    Found,
    IndexCorruptionError,
    NotFound,
    NotFoundError,
)


def _assert_aliased(index):
    """Both views of every live record resolve to the identical object."""
    for record in index.records():
        by_path = index.find_by_path(record.path)
        by_digest = index.find_by_digest(record.digest)
        assert by_path.record is by_digest.record


class TestLookups:
    """Tests for find_by_digest and find_by_path."""

    def test_empty_index(self):
        """Lookups on an empty index report NotFound."""
        index = DigestIndex()

        assert len(index) == 0
        assert isinstance(index.find_by_digest("d0"), NotFound)
        assert isinstance(index.find_by_path("/lib/a.cmi"), NotFound)
        assert index.reverse_dependencies("d0") == []

    def test_found_after_add(self, make_record):
        """An added record is found under both keys."""
        index = DigestIndex()
        record = make_record("A", "da", path="/lib/a.cmi")

        index.add(record)

        by_digest = index.find_by_digest("da")
        by_path = index.find_by_path("/lib/a.cmi")
        assert isinstance(by_digest, Found)
        assert by_digest.found
        assert by_digest.record is record
        assert by_path.unwrap() is record
        assert "da" in index

    def test_not_found_unwrap_raises(self):
        """NotFound.unwrap raises NotFoundError carrying the key."""
        result = DigestIndex().find_by_digest("missing")

        assert not result.found
        with pytest.raises(NotFoundError) as excinfo:
            result.unwrap()
        assert excinfo.value.key == "missing"
        assert isinstance(excinfo.value, KeyError)


class TestMutators:
    """Tests for add and remove."""

    def test_remove_unknown_is_noop(self):
        """Removing an unknown digest changes nothing."""
        index = DigestIndex()

        index.remove("nope")

        assert len(index) == 0
        assert not index.pending

    def test_remove_queues_record(self, make_record):
        """A removed record disappears from both views and is queued."""
        index = DigestIndex()
        record = make_record("A", "da")
        index.add(record)

        index.remove("da")

        assert isinstance(index.find_by_digest("da"), NotFound)
        assert isinstance(index.find_by_path(record.path), NotFound)
        assert len(index) == 0

    def test_add_same_record_is_noop(self, make_record):
        """Re-adding the same path and digest neither logs nor queues."""
        index = DigestIndex()
        index.add(make_record("A", "da"))
        index.compact()

        with capture_logs() as logs:
            index.add(make_record("A", "da", mtime=1))

        assert not index.pending
        assert logs == []
        assert index.find_by_digest("da").record.mtime != 1

    def test_add_replaces_path(self, make_record):
        """A new digest at a recorded path is a remove followed by an add."""
        index = DigestIndex()
        index.add(make_record("A", "da1", deps=["db"], path="/lib/a.cmi"))
        index.compact()

        index.add(make_record("A", "da2", path="/lib/a.cmi"))

        assert [r.digest for r in index.pending.removals] == ["da1"]
        assert [r.digest for r in index.pending.additions] == ["da2"]
        assert isinstance(index.find_by_digest("da1"), NotFound)
        assert index.find_by_digest("da2").record.path == "/lib/a.cmi"
        assert "da1" not in index.reverse_dependencies("db")
        _assert_aliased(index)

    def test_same_digest_at_new_path_keeps_holder(self, make_record):
        """One record per digest: a copy at another path is skipped."""
        index = DigestIndex()
        index.add(make_record("A", "da", path="/lib/a.cmi"))
        index.compact()

        with capture_logs() as logs:
            index.add(make_record("A", "da", path="/copy/a.cmi"))

        assert not index.pending
        assert isinstance(index.find_by_path("/copy/a.cmi"), NotFound)
        assert index.find_by_digest("da").record.path == "/lib/a.cmi"
        assert len(index) == 1
        assert [entry["event"] for entry in logs] == ["add_skipped"]
        assert logs[0]["reason"] == "duplicate_digest"
        assert logs[0]["held_by"] == "/lib/a.cmi"
        _assert_aliased(index)

    def test_path_rewritten_to_held_digest(self, make_record):
        """A path whose new digest is held elsewhere loses its old record."""
        index = DigestIndex()
        index.add(make_record("A", "da", path="/lib/a.cmi"))
        index.add(make_record("B", "db", path="/lib/b.cmi"))
        index.compact()

        index.add(make_record("A", "da", path="/lib/b.cmi"))

        assert [r.digest for r in index.pending.removals] == ["db"]
        assert index.pending.additions == []
        assert isinstance(index.find_by_path("/lib/b.cmi"), NotFound)
        assert index.find_by_digest("da").record.path == "/lib/a.cmi"
        _assert_aliased(index)

    def test_corruption_is_fatal(self, make_record):
        """A path entry pointing elsewhere raises IndexCorruptionError."""
        index = DigestIndex()
        index.add(make_record("A", "da", path="/lib/a.cmi"))
        index.add(make_record("B", "db", path="/lib/b.cmi"))
        index._by_path["/lib/a.cmi"] = index._by_path["/lib/b.cmi"]

        with pytest.raises(IndexCorruptionError):
            index.remove("da")

    def test_aliasing_after_mixed_operations(self, make_record):
        """Views stay aliased through adds, replacements and removals."""
        index = DigestIndex()
        index.add(make_record("A", "da", deps=["db"]))
        index.add(make_record("B", "db", deps=["dc"]))
        index.add(make_record("C", "dc"))
        index.remove("db")
        index.add(make_record("B", "db2", deps=["dc"]))
        index.add(make_record("A", "da2", deps=["db2"]))
        index.remove("dc")

        _assert_aliased(index)
        assert [r.digest for r in index.records()] == ["da2", "db2"]


class TestCompaction:
    """Tests for reverse dependencies and lazy compaction."""

    def test_chain(self, make_record):
        """For A -> B -> C, dependents of B are A only."""
        index = DigestIndex()
        index.add(make_record("A", "da", deps=["db"]))
        index.add(make_record("B", "db", deps=["dc"]))
        index.add(make_record("C", "dc"))

        assert index.reverse_dependencies("db") == ["da"]
        assert "dc" not in index.reverse_dependencies("db")

        index.remove("da")

        assert index.reverse_dependencies("db") == []
        assert "db" not in index.graph

    def test_graph_updates_lazily(self, make_record):
        """Mutations are queued until the next read compacts them."""
        index = DigestIndex()
        index.add(make_record("A", "da", deps=["db"]))

        assert len(index.graph) == 0
        assert len(index.pending.additions) == 1

        index.find_by_path("/lib/a.cmi")

        assert not index.pending
        assert index.graph.dependents("db") == ["da"]

    def test_same_batch_churn(self, make_record):
        """Remove and re-add of an identical record in one batch is a net no-op."""
        index = DigestIndex()
        record = make_record("A", "da", deps=["db"])
        index.add(record)
        index.compact()

        index.remove("da")
        index.add(record)

        assert index.reverse_dependencies("db") == ["da"]

    def test_compact_nothing_to_do(self):
        """Compaction with an empty delta only logs."""
        index = DigestIndex()

        with capture_logs() as logs:
            index.compact()

        assert [entry["event"] for entry in logs] == ["compact_skipped"]

    def test_compaction_logs(self, make_record):
        """Compaction reports its start and completion."""
        index = DigestIndex()
        index.add(make_record("A", "da", deps=["db"]))

        with capture_logs() as logs:
            index.compact()

        events = [entry["event"] for entry in logs]
        assert events[0] == "compact_started"
        assert events[-1] == "compact_done"
        assert "backdeps_updated" in events

    def test_repr(self, make_record):
        """Test string representation."""
        index = DigestIndex()
        index.add(make_record("A", "da"))

        assert "records=1" in repr(index)
        assert "pending_additions=1" in repr(index)
