"""Services module - query execution, page assembly and ledger operations."""

from .executor import QueryExecutor, ScanOutcome
from .pages import assemble_page, cursor_for
from .ledger import LedgerService, get_record_store

__all__ = [
    "QueryExecutor",
    "ScanOutcome",
    "assemble_page",
    "cursor_for",
    "LedgerService",
    "get_record_store",
]
