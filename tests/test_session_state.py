import json
import os
import tempfile
import unittest
from pathlib import Path

from raffledesk.session_state import (
    IMPERSONATING_KEY,
    ORGANIZER_KEY,
    SUPER_ADMIN_KEY,
    JsonFileSessionStore,
    MemorySessionStore,
    SessionState,
    SessionStore,
)
from raffledesk.sync import ADMIN, ANONYMOUS, COLLABORATOR, ORGANIZER, Scope

ORGANIZER_RECORD = {"id": "org-1", "name": "Triade", "organizerCode": "ABC"}
COLLABORATOR_RECORD = {"id": "col-1", "name": "Ana", "companyId": "comp-1"}


class TestPrecedence(unittest.TestCase):
    def test_anonymous_by_default(self):
        state = SessionState()
        self.assertIsNone(state.effective_organizer)
        self.assertEqual(state.active_scope(), Scope(ANONYMOUS))

    def test_admin_hides_stored_organizer(self):
        state = SessionState(organizer=ORGANIZER_RECORD, is_super_admin=True)
        self.assertIsNone(state.effective_organizer)
        self.assertEqual(state.active_scope().kind, ADMIN)

    def test_impersonation_wins_over_admin(self):
        state = SessionState(
            organizer=ORGANIZER_RECORD, is_super_admin=True, impersonating=True
        )
        self.assertEqual(state.effective_organizer, ORGANIZER_RECORD)
        self.assertEqual(state.active_scope(), Scope(ORGANIZER, "org-1"))

    def test_organizer_scope_before_collaborator(self):
        state = SessionState(organizer=ORGANIZER_RECORD, collaborator=COLLABORATOR_RECORD)
        self.assertEqual(state.active_scope().kind, ORGANIZER)
        state = state.evolve(organizer=None)
        self.assertEqual(state.active_scope(), Scope(COLLABORATOR, "comp-1"))


class TestPersistence(unittest.TestCase):
    def test_values_are_json_encoded(self):
        store = MemorySessionStore()
        store.save(SessionState(organizer=ORGANIZER_RECORD, is_super_admin=True))
        self.assertEqual(json.loads(store.data[ORGANIZER_KEY]), ORGANIZER_RECORD)
        self.assertEqual(store.data[SUPER_ADMIN_KEY], "true")
        self.assertEqual(store.data[IMPERSONATING_KEY], "false")
        self.assertEqual(
            store.load(), SessionState(organizer=ORGANIZER_RECORD, is_super_admin=True)
        )

    def test_unreadable_values_fall_back(self):
        store = MemorySessionStore(
            {ORGANIZER_KEY: "{not json", SUPER_ADMIN_KEY: '"yes"'}
        )
        with self.assertLogs("raffledesk.session_state", level="WARNING"):
            state = store.load()
        self.assertEqual(state, SessionState())

    def test_file_store_round_trip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "session.json"
            store = JsonFileSessionStore(path)
            self.assertEqual(store.load(), SessionState())

            state = SessionState(collaborator=COLLABORATOR_RECORD, selected_event_id="ev-1")
            store.save(state)
            self.assertEqual(JsonFileSessionStore(path).load(), state)

    def test_incomplete_store_cannot_be_built(self):
        class LoadOnly(SessionStore):
            def load(self):
                return SessionState()

        with self.assertRaises(TypeError):
            LoadOnly()

    def test_corrupt_file_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "session.json")
            with open(path, "w", encoding="utf-8") as fh:
                fh.write("[[[")
            with self.assertLogs("raffledesk.session_state", level="WARNING"):
                self.assertEqual(JsonFileSessionStore(path).load(), SessionState())


if __name__ == "__main__":
    unittest.main()
