"""
Visitor log import.

Seeds a visitor analytics store from Apache combined access logs:

* ``log_parser`` – one line into a LogEntry
* ``noise_filter`` – drops static-asset requests
* ``registry`` – visitor get-or-create, visit counts and ignore lists
* ``agent_ledger`` – user-agent occurrence counts
* ``batching`` – bounded commit units over one transaction context
* ``pipeline`` – orchestration across files with per-line failure isolation
"""

from .agent_ledger import UserAgentLedger, classify
from .batching import BatchTransactionManager, TransactionContext, TransactionState
from .errors import (
    FatalInputError,
    LineParseError,
    RegistryCreationError,
    TransientPersistenceError,
    UserDeclinedError,
    VisitorImportError,
)
from .file_selection import count_lines, resolve_log_files
from .log_parser import LineParser
from .noise_filter import NoiseFilter
from .pipeline import ImportPipeline
from .registry import VisitorRegistry

__all__ = [
    "UserAgentLedger",
    "classify",
    "BatchTransactionManager",
    "TransactionContext",
    "TransactionState",
    "FatalInputError",
    "LineParseError",
    "RegistryCreationError",
    "TransientPersistenceError",
    "UserDeclinedError",
    "VisitorImportError",
    "count_lines",
    "resolve_log_files",
    "LineParser",
    "NoiseFilter",
    "ImportPipeline",
    "VisitorRegistry",
]
