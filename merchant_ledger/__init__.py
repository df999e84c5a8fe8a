"""Keyset-paginated merchant transaction ledger."""

__version__ = "0.1.0"
