"""Reconcile scraped MLB draft prospects and picks against a stored roster."""

__version__ = "0.1.0"
