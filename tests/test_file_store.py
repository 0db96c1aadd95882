"""Tests for the file-based document store."""

import json

import pytest

from organizer.adapters.file_store import FileDocumentStore


@pytest.fixture
def db(tmp_path):
    return FileDocumentStore(tmp_path)


class TestFileDocumentStore:
    def test_set_and_get(self, db, tmp_path):
        db.set("tasks", "t1", {"title": "Write tests"})
        assert db.get("tasks", "t1") == {"id": "t1", "title": "Write tests"}
        assert (tmp_path / "tasks" / "t1.json").exists()

    def test_get_missing(self, db):
        assert db.get("tasks", "nope") is None

    def test_add_generates_id(self, db):
        doc_id = db.add("tasks", {"title": "New"})
        assert doc_id
        assert db.get("tasks", doc_id)["title"] == "New"

    def test_add_keeps_given_id(self, db):
        assert db.add("tasks", {"id": "mine", "title": "New"}) == "mine"

    def test_update_merges(self, db):
        db.set("tasks", "t1", {"title": "Old", "status": "todo"})
        db.update("tasks", "t1", {"status": "completed"})
        assert db.get("tasks", "t1") == {"id": "t1", "title": "Old", "status": "completed"}

    def test_update_missing_raises(self, db):
        with pytest.raises(KeyError):
            db.update("tasks", "nope", {"status": "completed"})

    def test_delete_is_idempotent(self, db):
        db.set("tasks", "t1", {"title": "Gone"})
        db.delete("tasks", "t1")
        db.delete("tasks", "t1")
        assert db.get("tasks", "t1") is None

    @pytest.mark.parametrize("bad_id", ["", "../escape", ".hidden", "a/b"])
    def test_rejects_unsafe_ids(self, db, bad_id):
        with pytest.raises(ValueError):
            db.get("tasks", bad_id)

    def test_query_filters(self, db):
        db.set("tasks", "a", {"userId": "u1", "status": "todo"})
        db.set("tasks", "b", {"userId": "u1", "status": "completed"})
        db.set("tasks", "c", {"userId": "u2", "status": "todo"})
        docs = db.query("tasks", [("userId", "u1"), ("status", "todo")])
        assert [d["id"] for d in docs] == ["a"]

    def test_query_order_missing_last(self, db):
        db.set("people", "a", {"lastName": "Turing"})
        db.set("people", "b", {})
        db.set("people", "c", {"lastName": "Hopper"})
        assert [d["id"] for d in db.query("people", order_by="lastName")] == ["c", "a", "b"]
        assert [d["id"] for d in db.query("people", order_by="lastName", descending=True)] == ["a", "c", "b"]

    def test_query_empty_collection(self, db):
        assert db.query("nothing") == []

    def test_query_skips_unreadable(self, db, tmp_path, caplog):
        db.set("tasks", "good", {"title": "ok"})
        (tmp_path / "tasks" / "bad.json").write_text("{not json")
        assert [d["id"] for d in db.query("tasks")] == ["good"]
        assert "bad.json" in caplog.text

    def test_files_are_json(self, db, tmp_path):
        db.set("tasks", "t1", {"title": "x"})
        assert json.loads((tmp_path / "tasks" / "t1.json").read_text())["id"] == "t1"
