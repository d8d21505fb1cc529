"""Exception types raised by chromascribe."""


class ChromascribeError(Exception):
    """Base class for all chromascribe errors."""


class InvalidInputError(ChromascribeError, ValueError):
    """Raised for malformed call arguments.

    Never recovered internally: wrong sample type, non-positive sample rate,
    unsupported channel layout, non power-of-two transform size, bad options.
    """
