class ConfigurationError(ValueError):
    """Raised when a game is constructed with unusable dimensions or timings."""
    pass


class InvariantViolation(RuntimeError):
    """Raised when engine state is corrupted, e.g. an impossible row-clear count.

    Not meant to be caught: it signals a bug, not a player-facing condition.
    """
    pass
