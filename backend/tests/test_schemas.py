from __future__ import annotations

import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from backend.app.schemas import (
    FolderCreate,
    ImportDocument,
    JournalCreate,
    JournalUpdate,
    RegisterRequest,
)


class JournalCreateTests(unittest.TestCase):
    def test_minimal_payload(self):
        payload = JournalCreate.model_validate(
            {"title": "T", "type": "daily", "date": "2024-01-01T00:00:00.000Z"}
        )
        self.assertEqual(payload.date, datetime(2024, 1, 1, tzinfo=timezone.utc))
        self.assertIsNone(payload.tags)
        self.assertIsNone(payload.folder_id)

    def test_camel_case_keys_and_ignored_identity_fields(self):
        payload = JournalCreate.model_validate(
            {
                "title": "T",
                "type": "travel",
                "date": "2024-01-01T10:00:00+02:00",
                "folderId": 4,
                "userId": 999,
                "id": 5,
            }
        )
        self.assertEqual(payload.folder_id, 4)
        self.assertEqual(payload.date, datetime(2024, 1, 1, 8, tzinfo=timezone.utc))
        self.assertNotIn("user_id", payload.model_dump())

    def test_rejects_bad_shapes(self):
        bad_payloads = [
            {"type": "daily", "date": "2024-01-01T00:00:00Z"},
            {"title": "", "type": "daily", "date": "2024-01-01T00:00:00Z"},
            {"title": "T", "date": "2024-01-01T00:00:00Z"},
            {"title": "T", "type": "poem", "date": "2024-01-01T00:00:00Z"},
            {"title": "T", "type": "daily"},
            {"title": "T", "type": "daily", "date": "yesterday"},
            {"title": "T", "type": "daily", "date": "2024-01-01"},
            {"title": "T", "type": "daily", "date": 1704067200},
            {"title": "T", "type": "daily", "date": "2024-01-01T00:00:00Z", "tags": "a,b"},
            {"title": "T", "type": "daily", "date": "2024-01-01T00:00:00Z", "tags": [1, 2]},
            {"title": "T", "type": "daily", "date": "2024-01-01T00:00:00Z", "folderId": "3"},
        ]
        for raw in bad_payloads:
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    JournalCreate.model_validate(raw)

    def test_validation_error_names_the_field(self):
        with self.assertRaises(ValidationError) as ctx:
            JournalCreate.model_validate({"title": "T", "type": "daily", "date": "nope"})
        locs = [err["loc"] for err in ctx.exception.errors()]
        self.assertIn(("date",), locs)

    def test_folder_id_must_fit_an_integer_column(self):
        base = {"title": "T", "type": "daily", "date": "2024-01-01T00:00:00Z"}
        JournalCreate.model_validate({**base, "folderId": 2**63 - 1})
        for bad in (2**63, 2**70, 0, -1):
            with self.subTest(folder_id=bad):
                with self.assertRaises(ValidationError):
                    JournalCreate.model_validate({**base, "folderId": bad})
                with self.assertRaises(ValidationError):
                    JournalUpdate.model_validate({"folderId": bad})

    def test_title_and_mood_lengths_match_columns(self):
        base = {"type": "daily", "date": "2024-01-01T00:00:00Z"}
        JournalCreate.model_validate({**base, "title": "x" * 255, "mood": "m" * 100})

        with self.assertRaises(ValidationError):
            JournalCreate.model_validate({**base, "title": "x" * 256})
        with self.assertRaises(ValidationError):
            JournalCreate.model_validate({**base, "title": "T", "mood": "m" * 101})
        with self.assertRaises(ValidationError):
            JournalUpdate.model_validate({"title": "x" * 256})
        with self.assertRaises(ValidationError):
            JournalUpdate.model_validate({"mood": "m" * 101})


class JournalUpdateTests(unittest.TestCase):
    def test_changes_only_contains_present_fields(self):
        payload = JournalUpdate.model_validate({"title": "X", "folderId": None})
        self.assertEqual(payload.changes(), {"title": "X", "folder_id": None})

    def test_empty_payload_is_valid(self):
        self.assertEqual(JournalUpdate.model_validate({}).changes(), {})

    def test_present_fields_follow_create_rules(self):
        for raw in ({"title": ""}, {"type": "poem"}, {"date": "not a date"}, {"tags": "x"}):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    JournalUpdate.model_validate(raw)

    def test_required_fields_may_not_be_null(self):
        for name in ("title", "type", "date", "content"):
            with self.subTest(field=name):
                with self.assertRaises(ValidationError):
                    JournalUpdate.model_validate({name: None})

    def test_tags_and_mood_may_be_null(self):
        payload = JournalUpdate.model_validate({"tags": None, "mood": None})
        self.assertEqual(payload.changes(), {"tags": None, "mood": None})


class FolderAndUserSchemaTests(unittest.TestCase):
    def test_folder_create(self):
        folder = FolderCreate.model_validate({"name": "Trips", "parentId": 3})
        self.assertEqual(folder.parent_id, 3)
        with self.assertRaises(ValidationError):
            FolderCreate.model_validate({"name": ""})

    def test_folder_parent_id_must_fit_an_integer_column(self):
        for bad in (2**70, 0):
            with self.subTest(parent_id=bad):
                with self.assertRaises(ValidationError):
                    FolderCreate.model_validate({"name": "Trips", "parentId": bad})

    def test_register_password_strength(self):
        RegisterRequest.model_validate({"username": "alice", "password": "Str0ng!pass"})
        for weak in ("short1!", "alllowercase1!", "ALLUPPERCASE1!", "NoDigits!!", "NoSpecial123"):
            with self.subTest(password=weak):
                with self.assertRaises(ValidationError):
                    RegisterRequest.model_validate({"username": "alice", "password": weak})

    def test_register_strips_username(self):
        req = RegisterRequest.model_validate({"username": "  alice ", "password": "Str0ng!pass"})
        self.assertEqual(req.username, "alice")


class ImportDocumentTests(unittest.TestCase):
    def test_accepts_bare_journal_list(self):
        doc = ImportDocument.model_validate(
            [{"title": "T", "type": "dream", "date": "2024-01-01T00:00:00Z"}]
        )
        self.assertEqual(len(doc.journals), 1)
        self.assertEqual(doc.folders, [])

    def test_accepts_export_document(self):
        doc = ImportDocument.model_validate(
            {
                "version": 1,
                "exportedAt": "2024-02-01T00:00:00Z",
                "folders": [{"id": 10, "userId": 1, "name": "Trips", "parentId": None}],
                "journals": [
                    {
                        "id": 11,
                        "userId": 1,
                        "title": "T",
                        "type": "travel",
                        "folderId": 10,
                        "date": "2024-01-01T00:00:00Z",
                        "createdAt": "2024-01-01T00:00:00Z",
                        "updatedAt": "2024-01-01T00:00:00Z",
                    }
                ],
            }
        )
        self.assertEqual(doc.folders[0].id, 10)
        self.assertEqual(doc.journals[0].folder_id, 10)

    def test_import_folder_id_is_bounded(self):
        with self.assertRaises(ValidationError):
            ImportDocument.model_validate({"folders": [{"id": 2**70, "name": "Trips"}]})

    def test_one_bad_item_rejects_the_document(self):
        with self.assertRaises(ValidationError):
            ImportDocument.model_validate(
                [
                    {"title": "ok", "type": "daily", "date": "2024-01-01T00:00:00Z"},
                    {"title": "bad", "type": "daily"},
                ]
            )


if __name__ == "__main__":
    unittest.main()
