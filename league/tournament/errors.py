"""
Exceptions and diagnostics raised by the ladder engine.

ValidationError: bad input to an operation, reported before any state change.
ConsistencyError: an imported snapshot breaks an invariant; rejected wholesale.
DiagnosticWarning: non-blocking condition, collected and returned with results.
"""


class LeagueError(Exception):
    """Base class for ladder engine errors."""


class ValidationError(LeagueError, ValueError):
    """An operation was given input it cannot accept. No state was changed."""


class IncompleteRound(ValidationError):
    """A participating player has no finishing position yet."""

    def __init__(self, table: str, missing):
        self.table = table
        self.missing = list(missing)
        super().__init__(
            f"Table {table}: missing positions for {', '.join(self.missing)}"
        )


class NoGameSelected(ValidationError):
    """A table has no game chosen."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Table {table}: no game selected")


class UndersizedRoster(ValidationError):
    """Too few players to fill every table."""

    def __init__(self, count: int, minimum: int):
        self.count = count
        self.minimum = minimum
        super().__init__(f"Need at least {minimum} players, got {count}")


class RoundClosed(ValidationError):
    """The round has already been finalized and can no longer change."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Round {index} is already finalized")


class UnknownPlayer(ValidationError):
    """No player with this id exists, or the player is not seated where expected."""


class UnknownTable(ValidationError):
    """No table with this label exists in the round."""


class InvalidPosition(ValidationError):
    """A finishing position outside 1..table size."""


class ConsistencyError(LeagueError):
    """A snapshot violates the engine's invariants."""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("Invalid tournament snapshot: " + "; ".join(self.problems))


class DiagnosticWarning(UserWarning):
    """A condition worth surfacing that does not block the engine."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"DiagnosticWarning({self.code!r}, {self.message!r})"
