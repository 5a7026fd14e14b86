from __future__ import annotations


class ResolutionError(RuntimeError):
    """Base for every recoverable failure while resolving a release URL."""


class NetworkUnreachable(ResolutionError):
    pass


class FetchEmpty(ResolutionError):
    pass


class FetchMalformed(ResolutionError):
    pass


class NoMatchingAsset(ResolutionError):
    pass


class UserDeclinedPrompt(ResolutionError):
    pass


class InvalidUserURL(ResolutionError, ValueError):
    pass
