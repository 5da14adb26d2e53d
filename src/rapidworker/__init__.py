
__version__ = "0.1.0"

from .context import Context, UNSET
from .template import substitute, UnresolvedPlaceholderError
from .model import ActionReport, ActionOutcome, ActionStep, ExecutionResult
from .config import WorkerSettings

__all__ = [
    "Context",
    "UNSET",
    "substitute",
    "UnresolvedPlaceholderError",
    "ActionReport",
    "ActionOutcome",
    "ActionStep",
    "ExecutionResult",
    "WorkerSettings",
    "__version__",
]
