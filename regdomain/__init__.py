"""Registrable-domain parsing backed by the Public Suffix List."""
from .parser import ParsedDomain, ParseError, get, is_valid, parse
from .rules import RuleRecord, ingest
from .store import RuleStore, default_store
from .updater import UpdateOptions, last_updated, update
from .validator import ERROR_CODES, ErrorCode

__version__ = "1.0.0"

__all__ = [
    "ERROR_CODES", "ErrorCode", "ParseError", "ParsedDomain", "RuleRecord",
    "RuleStore", "UpdateOptions", "default_store", "get", "ingest", "is_valid",
    "last_updated", "parse", "update",
]
