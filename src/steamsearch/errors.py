__all__ = [
    "SteamSearchError",
    "ValidationError",
    "PreconditionError",
    "AuthError",
    "NetworkError",
    "ProductLookupError",
    "SideEffectError",
]


class SteamSearchError(Exception):
    pass


class ValidationError(SteamSearchError):
    """Bad user input, the prompt can be re-issued"""


class PreconditionError(SteamSearchError):
    """A required local program is not running"""


class AuthError(SteamSearchError):
    pass


class NetworkError(SteamSearchError):
    pass


class ProductLookupError(SteamSearchError, LookupError):
    pass


class SideEffectError(SteamSearchError):
    """Clipboard or console launch failed, never fatal"""
