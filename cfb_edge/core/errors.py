"""Exception types raised (or reported) by the evaluation engine."""


class EdgeEngineError(Exception):
    pass


class InvalidOddsError(EdgeEngineError, ValueError):
    """American odds value that is not a valid encoding (|odds| < 100, NaN...)."""


class InvalidInputError(EdgeEngineError, ValueError):
    """Non-positive sigma, probability outside (0, 1), non-finite margin or line."""


class AmbiguousMatchWarning(UserWarning):
    """More than one prediction record matched a single odds record.

    Never raised by the engine: its name tags the diagnostic entry and the
    pass continues with whatever the configured match policy selected.
    """
