from __future__ import annotations

import os
from pathlib import Path
import sys
import unittest
from unittest.mock import MagicMock, patch

ROOT = Path(__file__).resolve().parents[1]
TESTS_ROOT = Path(__file__).resolve().parent
for path in (ROOT, TESTS_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from bluegreen_state.core.config import Settings
from bluegreen_state.domain.colors import Color
from bluegreen_state.domain.errors import InvalidColorError
from bluegreen_state.models import DeploymentState
from bluegreen_state.services.deployment_state import DeploymentStateRepository
from bluegreen_state.services.dynamodb_store import DynamoStateStore, deserialize_item
from fake_dynamodb import FakeDynamoClient


def _settings() -> Settings:
    with patch.dict(os.environ, {}, clear=True):
        return Settings(
            _env_file=None,
            table_name="deployments",
            actor="release-bot",
            run_id="77",
            workflow="deploy",
        )


class EnsureTableTests(unittest.TestCase):
    def test_missing_table_is_created_then_awaited(self) -> None:
        store = MagicMock()
        store.table_name = "deployments"
        store.table_exists.return_value = False
        calls: list[str] = []
        store.create_table.side_effect = lambda: calls.append("create")
        store.wait_until_active.side_effect = lambda: calls.append("wait")

        repository = DeploymentStateRepository(store, settings=_settings())

        self.assertTrue(repository.ensure_table())
        self.assertEqual(calls, ["create", "wait"])

    def test_existing_table_is_left_alone(self) -> None:
        store = MagicMock()
        store.table_name = "deployments"
        store.table_exists.return_value = True

        repository = DeploymentStateRepository(store, settings=_settings())

        self.assertFalse(repository.ensure_table())
        store.create_table.assert_not_called()
        store.wait_until_active.assert_not_called()

    def test_ensure_table_is_idempotent_against_the_store(self) -> None:
        client = FakeDynamoClient()
        store = DynamoStateStore(client, table_name="deployments", sleep=lambda _: None)
        repository = DeploymentStateRepository(store, settings=_settings())

        self.assertTrue(repository.ensure_table())
        self.assertFalse(repository.ensure_table())
        self.assertEqual(client.calls.count("create_table"), 1)


class RepositoryReadWriteTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeDynamoClient()
        self.client.add_table("deployments")
        store = DynamoStateStore(self.client, table_name="deployments", sleep=lambda _: None)
        self.repository = DeploymentStateRepository(store, settings=_settings())

    def test_get_returns_none_for_unknown_key(self) -> None:
        self.assertIsNone(self.repository.get("checkout"))

    def test_put_stamps_time_and_merges_provenance(self) -> None:
        written = self.repository.put("checkout", Color.GREEN, {"action": "toggle", "previous_color": "blue"})

        row = deserialize_item(self.client.put_requests[0])
        self.assertEqual(row["deployment_key"], "checkout")
        self.assertEqual(row["active_color"], "green")
        self.assertTrue(row["last_updated"])
        self.assertEqual(
            row["metadata"],
            {
                "action": "toggle",
                "previous_color": "blue",
                "updated_by": "release-bot",
                "run_id": "77",
                "workflow": "deploy",
            },
        )
        self.assertEqual(self.repository.get("checkout"), written)

    def test_put_drops_unknown_metadata_values(self) -> None:
        self.repository.put("checkout", Color.BLUE, {"action": "set-active", "previous_color": None})

        state = self.repository.get("checkout")
        self.assertIsNotNone(state)
        self.assertNotIn("previous_color", state.metadata)
        self.assertEqual(state.metadata["action"], "set-active")


class DeploymentStateRecordTests(unittest.TestCase):
    def test_from_item_defaults_missing_metadata(self) -> None:
        state = DeploymentState.from_item(
            {"deployment_key": "checkout", "active_color": "Blue", "last_updated": "2026-01-01T00:00:00+00:00"}
        )
        self.assertEqual(state.active_color, Color.BLUE)
        self.assertEqual(state.metadata, {})

    def test_from_item_rejects_corrupt_color(self) -> None:
        with self.assertRaises(InvalidColorError):
            DeploymentState.from_item({"deployment_key": "checkout", "active_color": "purple"})


if __name__ == "__main__":
    unittest.main()
