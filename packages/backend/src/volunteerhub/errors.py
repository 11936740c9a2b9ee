"""Error taxonomy shared by the stores, the REST routers and the gateway.

Stores raise these; routers turn them into HTTP errors and the realtime
gateway turns them into ``chatError`` events on the originating connection.
"""


class VolunteerHubError(Exception):
    """Base class for expected, user-facing failures."""


class AuthError(VolunteerHubError):
    """Missing, invalid or expired credential, or the user no longer exists."""


class NotFoundError(VolunteerHubError):
    """Referenced entity does not exist or is not owned by the requester."""


class ValidationError(VolunteerHubError):
    """Malformed input. Raised before anything is persisted."""


class PersistenceError(VolunteerHubError):
    """The backing store is unavailable or a write failed."""
