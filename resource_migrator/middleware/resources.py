import logging
from typing import Optional

from resource_migrator.logic import batching, validation
from resource_migrator.logic.engine import ConfirmCallback, MigrationEngine
from resource_migrator.middleware.error_handler import handle_errors
from resource_migrator.middleware.json_support import support_json_return
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.migration_ledger import MigrationLedger
from resource_migrator.models.migration_settings import MigrationSettings

logger = logging.getLogger(__name__)


def _no_failures(ledger: MigrationLedger) -> bool:
    return not ledger.has_failures()


@support_json_return()
@handle_errors("index templates")
def validate_index_templates(source: Cluster, target: Cluster, pattern: str) -> validation.ValidationResult:
    logger.info(f"Validating index templates matching '{pattern}'")
    return validation.validate_index_templates(source, target, pattern)


@support_json_return()
@handle_errors("ingest pipelines")
def validate_ingest_pipelines(source: Cluster, target: Cluster) -> validation.ValidationResult:
    logger.info("Validating ingest pipelines")
    return validation.validate_ingest_pipelines(source, target)


@support_json_return()
@handle_errors("index templates", is_success=_no_failures)
def migrate_index_templates(engine: MigrationEngine, pattern: str) -> MigrationLedger:
    return engine.migrate_index_templates(pattern)


@support_json_return()
@handle_errors("ingest pipelines", is_success=_no_failures)
def migrate_ingest_pipelines(engine: MigrationEngine, ids: str) -> MigrationLedger:
    return engine.migrate_ingest_pipelines(ids)


@support_json_return()
@handle_errors("indices", is_success=_no_failures)
def migrate_indices(engine: MigrationEngine, pattern: str) -> MigrationLedger:
    return engine.migrate_indices(pattern)


@support_json_return()
@handle_errors("indices", is_success=_no_failures)
def migrate_all_indices(engine: MigrationEngine, confirm: Optional[ConfirmCallback] = None) -> MigrationLedger:
    return engine.migrate_all_indices(confirm)


@support_json_return()
@handle_errors("stored scripts", is_success=_no_failures)
def migrate_stored_scripts(engine: MigrationEngine, ids: str) -> MigrationLedger:
    return engine.migrate_stored_scripts(ids)


@support_json_return()
@handle_errors("index batches")
def generate_index_batches(source: Cluster, settings: MigrationSettings, output_dir: str, batch_size: int):
    path = batching.generate_index_batches(source, output_dir, batch_size,
                                           excluded_substrings=settings.excluded_index_substrings)
    if path is None:
        return {"path": None, "message": "No indices found, no batch file written"}
    return {"path": path, "message": f"Index batches written to {path}"}
