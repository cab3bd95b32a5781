from .models import CallMessage, LedgerConfig, LogEntry, Receipt
from .simulator import CallError, LedgerError, LedgerSimulator, NotFoundError, SubmissionError

__all__ = [
    "CallError",
    "CallMessage",
    "LedgerConfig",
    "LedgerError",
    "LedgerSimulator",
    "LogEntry",
    "NotFoundError",
    "Receipt",
    "SubmissionError",
]
