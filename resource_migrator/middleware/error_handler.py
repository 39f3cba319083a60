import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from resource_migrator.exceptions import FatalMigrationError
from resource_migrator.models.migration_ledger import MigrationLedger
from resource_migrator.models.utils import ExitCode

logger = logging.getLogger(__name__)


@dataclass
class FailedRun:
    """The report of a run that stopped on an error, with whatever ledger it had built so far."""
    message: str
    ledger: Optional[MigrationLedger] = None

    def to_dict(self) -> Dict:
        result = self.ledger.to_dict() if self.ledger is not None else {}
        result["error"] = self.message
        return result

    def render(self) -> str:
        if self.ledger is None:
            return self.message
        return f"{self.ledger.render()}\n{self.message}"


def handle_errors(operation_type: str,
                  is_success: Callable[[Any], bool] = lambda report: True
                  ) -> Callable[..., Callable[..., Tuple[ExitCode, Any]]]:
    def decorator(func: Callable[..., Any]) -> Callable[..., Tuple[ExitCode, Any]]:
        def wrapper(*args, **kwargs) -> Tuple[ExitCode, Any]:
            try:
                report = func(*args, **kwargs)
            except FatalMigrationError as e:
                logger.error(f"Fatal error on {func.__name__} for {operation_type}: {e}")
                return ExitCode.FAILURE, FailedRun(f"Fatal error on {func.__name__} for {operation_type}: "
                                                   f"{e}", e.ledger)
            except Exception as e:
                logger.error(f"Failed to {func.__name__} {operation_type}: {e}")
                return ExitCode.FAILURE, FailedRun(f"Failure on {func.__name__} for {operation_type}: "
                                                   f"{type(e).__name__} {e}")
            if is_success(report):
                return ExitCode.SUCCESS, report
            return ExitCode.FAILURE, report
        return wrapper
    return decorator
