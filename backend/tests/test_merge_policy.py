from __future__ import annotations

import sys
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from backend.app.storage import Journal, apply_journal_defaults, merge_journal_update

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _journal(**overrides) -> Journal:
    base = dict(
        id=7,
        user_id=1,
        title="Morning",
        type="daily",
        content="<p>hello</p>",
        folder_id=3,
        tags=["work", "coffee"],
        mood="calm",
        date=T0,
        created_at=T0,
        updated_at=T0,
    )
    base.update(overrides)
    return Journal(**base)


class ApplyJournalDefaultsTests(unittest.TestCase):
    def test_fills_defaults_for_omitted_fields(self):
        now = T0 + timedelta(hours=5)
        journal = apply_journal_defaults(10, 2, {"title": "T", "type": "daily"}, now=now)

        self.assertEqual(journal.id, 10)
        self.assertEqual(journal.user_id, 2)
        self.assertEqual(journal.content, "")
        self.assertEqual(journal.tags, [])
        self.assertEqual(journal.mood, "")
        self.assertIsNone(journal.folder_id)
        self.assertEqual(journal.date, now)
        self.assertEqual(journal.created_at, now)
        self.assertEqual(journal.updated_at, now)

    def test_null_tags_and_mood_become_defaults(self):
        journal = apply_journal_defaults(
            1, 1, {"title": "T", "type": "dream", "tags": None, "mood": None, "content": None}, now=T0
        )
        self.assertEqual(journal.tags, [])
        self.assertEqual(journal.mood, "")
        self.assertEqual(journal.content, "")

    def test_date_string_is_parsed(self):
        journal = apply_journal_defaults(
            1, 1, {"title": "T", "type": "travel", "date": "2023-05-06T07:08:09.000Z"}, now=T0
        )
        self.assertEqual(journal.date, datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc))


class MergeJournalUpdateTests(unittest.TestCase):
    def test_title_only_update_keeps_everything_else(self):
        existing = _journal()
        now = T0 + timedelta(minutes=1)

        merged = merge_journal_update(existing, {"title": "X"}, now=now)

        self.assertEqual(merged.title, "X")
        self.assertEqual(merged.tags, ["work", "coffee"])
        self.assertEqual(merged.mood, "calm")
        self.assertEqual(merged.content, "<p>hello</p>")
        self.assertEqual(merged.date, T0)
        self.assertEqual(merged.folder_id, 3)
        self.assertEqual(merged.updated_at, now)
        self.assertEqual(merged.created_at, T0)

    def test_empty_tags_do_not_clear_existing_tags(self):
        merged = merge_journal_update(_journal(), {"tags": []}, now=T0)
        self.assertEqual(merged.tags, ["work", "coffee"])

    def test_empty_or_null_mood_does_not_clear_existing_mood(self):
        self.assertEqual(merge_journal_update(_journal(), {"mood": ""}, now=T0).mood, "calm")
        self.assertEqual(merge_journal_update(_journal(), {"mood": None}, now=T0).mood, "calm")
        self.assertEqual(merge_journal_update(_journal(), {"tags": None}, now=T0).tags, ["work", "coffee"])

    def test_truthy_tags_and_mood_replace(self):
        merged = merge_journal_update(_journal(), {"tags": ["trip"], "mood": "happy"}, now=T0)
        self.assertEqual(merged.tags, ["trip"])
        self.assertEqual(merged.mood, "happy")

    def test_folder_can_be_cleared_explicitly(self):
        merged = merge_journal_update(_journal(), {"folder_id": None}, now=T0)
        self.assertIsNone(merged.folder_id)

    def test_present_fields_replace(self):
        merged = merge_journal_update(
            _journal(),
            {"content": "", "type": "gratitude", "date": "2025-02-03T04:05:06Z"},
            now=T0,
        )
        self.assertEqual(merged.content, "")
        self.assertEqual(merged.type, "gratitude")
        self.assertEqual(merged.date, datetime(2025, 2, 3, 4, 5, 6, tzinfo=timezone.utc))

    def test_identity_fields_are_never_taken_from_changes(self):
        merged = merge_journal_update(
            _journal(),
            {"id": 99, "user_id": 42, "created_at": T0 + timedelta(days=1), "bogus": 1},
            now=T0,
        )
        self.assertEqual(merged.id, 7)
        self.assertEqual(merged.user_id, 1)
        self.assertEqual(merged.created_at, T0)
        self.assertFalse(hasattr(merged, "bogus"))

    def test_updated_at_never_moves_backwards(self):
        existing = _journal(updated_at=T0 + timedelta(hours=1))
        merged = merge_journal_update(existing, {"title": "X"}, now=T0)
        self.assertEqual(merged.updated_at, T0 + timedelta(hours=1))

    def test_existing_record_is_not_mutated(self):
        existing = _journal()
        merge_journal_update(existing, {"title": "X", "tags": ["new"]}, now=T0 + timedelta(seconds=1))
        self.assertEqual(existing.title, "Morning")
        self.assertEqual(existing.tags, ["work", "coffee"])
        self.assertEqual(existing.updated_at, T0)


if __name__ == "__main__":
    unittest.main()
