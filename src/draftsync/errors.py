"""Exception types raised across ingestion, reconciliation and publication."""

from __future__ import annotations


class DraftSyncError(Exception):
    """Base class for draftsync errors."""


class SourceUnavailable(DraftSyncError):
    """A roster, prospect or pick source failed to deliver data."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.message = message


class MalformedRecord(DraftSyncError, ValueError):
    """A raw record could not be turned into a usable player record."""


class PublicationFailure(DraftSyncError):
    """The persistence or broadcast sink rejected a completed cycle."""
