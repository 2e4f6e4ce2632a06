"""Writes battle log entries to file for debugging and analysis."""

import json
import os
from typing import Any, Dict, Optional, TextIO

from pokebattle.game.schema.battle_state import BattleState


class BattleLogWriter:
    """Appends each new battle log entry to a JSON lines file."""

    def __init__(
        self,
        player_name: str,
        epoch_secs: int,
        battle_id: str,
        opponent_name: str,
        log_dir: str = "/tmp/logs",
    ) -> None:
        """Initialize the log writer.

        Args:
            player_name: Name of the player the log is written for
            epoch_secs: Timestamp in epoch seconds for the log filename
            battle_id: Battle record id
            opponent_name: Name of the opposing player
            log_dir: Directory the log file is created in
        """
        self._log_dir = log_dir
        self._written = 0

        os.makedirs(self._log_dir, exist_ok=True)
        filename = f"{player_name}_{opponent_name}_{battle_id}_{epoch_secs}.jsonl"
        self.filepath = os.path.join(self._log_dir, filename)
        self._file: Optional[TextIO] = open(self.filepath, "w")

    def write_state(self, state: BattleState) -> int:
        """Write the log entries added since the last call.

        Args:
            state: Latest battle record

        Returns:
            Number of entries written
        """
        if self._file is None:
            return 0

        new_entries = state.log[self._written :]
        for offset, message in enumerate(new_entries):
            entry: Dict[str, Any] = {
                "index": self._written + offset,
                "turn_number": state.turn_number,
                "event": message,
            }
            self._file.write(f"{json.dumps(entry)}\n")
        self._file.flush()
        self._written += len(new_entries)
        return len(new_entries)

    def close(self) -> None:
        """Close the log file."""
        if self._file is not None:
            self._file.close()
            self._file = None
