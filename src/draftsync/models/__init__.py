"""Record models exchanged between sources, the reconciler and publishers."""

from .prospect import DraftInfo, DraftPickRecord, PickNumber, ProspectRecord

__all__ = ["DraftInfo", "DraftPickRecord", "PickNumber", "ProspectRecord"]
