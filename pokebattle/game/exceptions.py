"""Custom exceptions for game-related errors."""


class DataFetchError(Exception):
    """Exception raised when the Pokemon data provider cannot serve a record.

    This is a retryable setup error: the battle does not start, and the caller
    may try again once the provider is reachable.

    Attributes:
        source: Identifier of the record or endpoint that failed
        detail: Human-readable failure description
    """

    def __init__(self, source: str, detail: str):
        """Initialize the DataFetchError.

        Args:
            source: Identifier of the record or endpoint that failed
            detail: Human-readable failure description
        """
        self.source = source
        self.detail = detail
        super().__init__(f"Failed to fetch {source}: {detail}")


class InvalidActionError(Exception):
    """Exception raised when a player submits an action that cannot be taken.

    Raised locally before any write to the battle record, so no state is
    mutated when it is thrown.

    Attributes:
        player_id: Player that submitted the action ("p1" or "p2")
        reason: Why the action was rejected
    """

    def __init__(self, player_id: str, reason: str):
        self.player_id = player_id
        self.reason = reason
        super().__init__(f"Invalid action for {player_id}: {reason}")


class TransactionConflictError(Exception):
    """Exception raised when a battle record changed during a transaction.

    Stores retry conflicts internally; this only reaches callers once the
    configured number of attempts is exhausted.
    """

    def __init__(self, battle_id: str, attempts: int):
        self.battle_id = battle_id
        self.attempts = attempts
        super().__init__(
            f"Transaction on battle {battle_id} conflicted {attempts} times"
        )


class BattleNotFoundError(Exception):
    """Exception raised when a battle record no longer exists.

    The opponent deletes the record after a decisive result, so clients treat
    this as the end of the battle rather than a failure.
    """

    def __init__(self, battle_id: str):
        self.battle_id = battle_id
        super().__init__(f"Battle not found: {battle_id}")
