import json
from typing import Any, Callable, Tuple

import yaml

from resource_migrator.models.utils import ExitCode


def _as_data(report: Any):
    return report.to_dict() if hasattr(report, "to_dict") else report


def support_json_return() -> Callable[[Callable[..., Tuple[ExitCode, Any]]], Callable[..., Tuple[ExitCode, str]]]:
    """Render the report half of an (ExitCode, report) result: JSON with as_json, otherwise the report's
    own text rendering, falling back to YAML for plain data.
    """
    def decorator(func: Callable[..., Tuple[ExitCode, Any]]) -> Callable[..., Tuple[ExitCode, str]]:
        def wrapper(*args, as_json=False, **kwargs) -> Tuple[ExitCode, str]:
            exit_code, report = func(*args, **kwargs)
            if as_json:
                return exit_code, json.dumps(_as_data(report))
            if hasattr(report, "render"):
                return exit_code, report.render()
            if isinstance(report, str):
                return exit_code, report
            return exit_code, yaml.safe_dump(report)
        return wrapper
    return decorator
