"""Exception types raised while loading and reporting on goroutine dumps."""


class GrainsError(RuntimeError):
    """Base class for every error grains reports to the user."""


class EmptyInputError(GrainsError):
    """The dump buffer was empty."""


class UnparsableInputError(GrainsError):
    """The dump buffer did not yield enough goroutines to analyze."""


class FetchError(GrainsError):
    """None of the requested dump sources could be fetched."""


class CommandError(GrainsError):
    """A report command or option assignment could not be understood."""
