"""Errors raised while generating the Roblox standard library."""


class GenerateError(Exception):
    """Base class for every error surfaced by the generator."""


class FetchFailed(GenerateError):
    """The API dump could not be downloaded."""

    def __init__(self, message: str = "error when getting API dump"):
        super().__init__(message)


class ParseFailed(GenerateError):
    """The API dump was downloaded but is not a valid dump."""

    def __init__(self, message: str = "error when parsing API dump"):
        super().__init__(message)


class MalformedInput(GenerateError):
    """The dump (or a builtin library) breaks an invariant the generator relies on."""


class UnknownMember(GenerateError):
    """A member kind the generator doesn't know about, only raised in strict mode."""
