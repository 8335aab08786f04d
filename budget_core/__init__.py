"""Core business logic package for the budget tracker."""

from .charts import ChartService
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .filters import FilterCriteria, apply_filters
from .models import Expense, Insight, SaveResult, Totals, ValidationResult
from .security import sanitize_input
from .services import BudgetTracker
from .storage import FileStore, KeyValueStore, MemoryStore, PersistenceManager

__all__ = [
    "BudgetTracker",
    "ChartService",
    "Expense",
    "FileStore",
    "FilterCriteria",
    "Insight",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceError",
    "PersistenceManager",
    "RecordNotFoundError",
    "SaveResult",
    "Totals",
    "ValidationError",
    "ValidationResult",
    "apply_filters",
    "sanitize_input",
]
