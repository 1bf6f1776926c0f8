"""Exception hierarchy for Rialto."""


class RialtoError(Exception):
    """Base exception."""


class ValidationError(RialtoError):
    """Malformed input, rejected before reaching the store."""


class NotFoundError(RialtoError):
    """Slot, reservation, closure or message absent."""


class UnavailableError(RialtoError):
    """Slot closed for the day or by a recurring closure."""


class CapacityError(RialtoError):
    """Not enough remaining seats for the party."""


class DuplicateError(RialtoError):
    """Row already exists for the same key."""


class InvalidTransitionError(RialtoError):
    """Status change not allowed by the state machine."""


class StoreError(RialtoError):
    """Underlying store call failed (network, auth, PostgREST)."""


class NotificationError(RialtoError):
    """Email relay rejected or never received the message."""


class AuthError(RialtoError):
    """Authentication failed."""


class ConfigError(RialtoError):
    """Invalid configuration."""
