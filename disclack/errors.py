"""Error hierarchy and operator-facing error classification."""

import asyncio

import asyncpg
import httpx


class DisclackError(Exception):
    """Base class for all Disclack errors."""
    pass


class NotFoundError(DisclackError):
    """The referenced user/channel does not exist on the remote directory.

    Recovered locally: the resolver falls back to a literal placeholder.
    """

    def __init__(self, platform: str, kind: str, ident: str):
        self.platform = platform
        self.kind = kind
        self.ident = ident
        super().__init__(f"{platform} {kind} not found: {ident}")


class UpstreamError(DisclackError):
    """Network or remote-API failure unrelated to existence.

    Never recovered inside a conversion; it aborts the whole message.
    """

    def __init__(self, platform: str, method: str, detail: str, status_code: int | None = None):
        self.platform = platform
        self.method = method
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"{platform} {method} failed: {detail}")


class InvalidIdentifierError(DisclackError):
    """A link/connect request carried a malformed platform id."""
    pass


class MappingConflictError(DisclackError):
    """A link/connect request collides with an existing mapping."""
    pass


def classify_error(e: Exception) -> str:
    """Classify a relay failure into a short message for logs or operators."""
    if isinstance(e, UpstreamError):
        if e.status_code == 429:
            return f"{e.platform.capitalize()} rate limited the bridge. Message dropped."
        if e.status_code in (401, 403):
            return f"{e.platform.capitalize()} rejected the bot token. Check credentials."
        if e.status_code is not None and 500 <= e.status_code < 600:
            return f"{e.platform.capitalize()} is having server issues. Message dropped."
        return f"{e.platform.capitalize()} API call {e.method} failed ({e.detail}). Message dropped."

    if isinstance(e, (InvalidIdentifierError, MappingConflictError)):
        return str(e)

    if isinstance(e, asyncpg.InterfaceError):
        return "Database connection pool exhausted. Please try again in a moment."
    if isinstance(e, asyncpg.PostgresError):
        return "Database error. Please try again later."

    if isinstance(e, httpx.ConnectError):
        return "Cannot connect to the platform API. Please check connectivity."
    if isinstance(e, (httpx.ReadTimeout, httpx.WriteTimeout, httpx.PoolTimeout, httpx.ConnectTimeout)):
        return "Request timed out. Please try again."
    if isinstance(e, asyncio.TimeoutError):
        return "Request timed out. Please try again."

    type_name = type(e).__name__
    return f"Something went wrong ({type_name}). Check logs for details."
