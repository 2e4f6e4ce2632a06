"""Unit tests for BattleLogWriter."""

import json
import os
import shutil
import tempfile
import unittest

from pokebattle.battle.battle_log_writer import BattleLogWriter
from pokebattle.game.schema.battle_state import BattleState


class BattleLogWriterTest(unittest.TestCase):
    """Test cases for BattleLogWriter."""

    def setUp(self) -> None:
        self.test_dir = tempfile.mkdtemp()
        self.writer = BattleLogWriter(
            player_name="red",
            epoch_secs=1234567890,
            battle_id="battle-abc",
            opponent_name="blue",
            log_dir=os.path.join(self.test_dir, "logs"),
        )

    def tearDown(self) -> None:
        self.writer.close()
        shutil.rmtree(self.test_dir)

    def _read_entries(self):
        with open(self.writer.filepath, "r") as f:
            return [json.loads(line) for line in f]

    def test_creates_file_in_log_dir(self) -> None:
        self.assertEqual(
            self.writer.filepath,
            os.path.join(self.test_dir, "logs", "red_blue_battle-abc_1234567890.jsonl"),
        )
        self.assertTrue(os.path.exists(self.writer.filepath))

    def test_only_new_entries_written(self) -> None:
        """Test that entries already written are not repeated."""
        state = BattleState().with_log("Red and Blue started a battle!")
        self.assertEqual(self.writer.write_state(state), 1)

        state = state.with_log("Pikachu used thunderbolt!", "Gyarados fainted!")
        self.assertEqual(self.writer.write_state(state), 2)
        self.assertEqual(self.writer.write_state(state), 0)

        entries = self._read_entries()
        self.assertEqual([e["index"] for e in entries], [0, 1, 2])
        self.assertEqual(entries[2]["event"], "Gyarados fainted!")
        self.assertEqual(entries[0]["turn_number"], 1)

    def test_write_after_close_is_noop(self) -> None:
        self.writer.close()

        self.assertEqual(self.writer.write_state(BattleState().with_log("late")), 0)
        self.assertEqual(self._read_entries(), [])


if __name__ == "__main__":
    unittest.main()
