"""
Error taxonomy for plumnote.

Every failure the store, query engine or sync engine reports is a
PlumnoteError. None of them are retried internally.
"""


class PlumnoteError(Exception):
    """Base class for all plumnote failures."""


class StoreUnavailable(PlumnoteError):
    """The store location cannot be created or written."""


class PermissionDenied(StoreUnavailable):
    """The OS refused access to the store document."""


class DiskFull(StoreUnavailable):
    """No space left to write the store document."""


class CorruptStore(PlumnoteError):
    """The store document exists but cannot be decoded."""


class InvalidQuery(PlumnoteError):
    """Bad filter mode, bad date or odd clause count."""


class InvalidTransfer(PlumnoteError):
    """A sync payload is missing, oversized or malformed."""


class SyncUnreachable(PlumnoteError):
    """The sync peer could not be reached or refused the exchange."""


class NoteNotFound(PlumnoteError):
    """No note exists under the requested id."""


class ForeignNote(PlumnoteError):
    """The note belongs to another author."""


class NotConfigured(PlumnoteError):
    """A required setting is missing."""
