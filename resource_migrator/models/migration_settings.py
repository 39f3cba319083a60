from dataclasses import dataclass, field
from typing import Dict, List

from resource_migrator.logic.enumerator import DEFAULT_EXCLUDED_SUBSTRINGS
from resource_migrator.logic.transformer import DEFAULT_REFRESH_INTERVAL, DEFAULT_REPLICA_COUNT

DEFAULT_ALL_INDICES_BATCH_SIZE = 100
DEFAULT_PATTERN_BATCH_SIZE = 20

SCHEMA = {
    "all_indices_batch_size": {"type": "integer", "min": 1, "required": False},
    "pattern_batch_size": {"type": "integer", "min": 1, "required": False},
    "excluded_index_substrings": {"type": "list", "schema": {"type": "string", "empty": False},
                                  "required": False},
    "mapping_type_conversions": {"type": "dict", "keysrules": {"type": "string"},
                                 "valuesrules": {"type": "string"}, "required": False},
    "replica_count": {"type": "string", "required": False},
    "refresh_interval": {"type": "string", "required": False},
}


@dataclass
class MigrationSettings:
    # Batch sizes only group items for logging; they never change what gets migrated
    all_indices_batch_size: int = DEFAULT_ALL_INDICES_BATCH_SIZE
    pattern_batch_size: int = DEFAULT_PATTERN_BATCH_SIZE
    excluded_index_substrings: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_SUBSTRINGS))
    # Merged over the built-in conversion table
    mapping_type_conversions: Dict[str, str] = field(default_factory=dict)
    replica_count: str = DEFAULT_REPLICA_COUNT
    refresh_interval: str = DEFAULT_REFRESH_INTERVAL

    @classmethod
    def from_config(cls, config: Dict) -> "MigrationSettings":
        return cls(**{key: value for key, value in config.items() if key in SCHEMA})
