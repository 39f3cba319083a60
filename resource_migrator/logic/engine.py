import logging
from typing import Callable, List, Optional

from resource_migrator.exceptions import FatalMigrationError
from resource_migrator.logic import enumerator
from resource_migrator.logic.executor import BatchExecutor
from resource_migrator.logic.handlers import all_handlers
from resource_migrator.logic.mapping_converter import MappingTypeConverter
from resource_migrator.logic.transformer import PayloadTransformer
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.migration_ledger import MigrationLedger
from resource_migrator.models.migration_settings import MigrationSettings
from resource_migrator.models.resource_kind import ResourceKind

logger = logging.getLogger(__name__)

ALL_INDICES_TITLE = "All Index Migration"

# Asked with the names about to be written; returning False stops the run before any write
ConfirmCallback = Callable[[List[str]], bool]


class MigrationEngine:
    """
    Migrates resources of one kind per call from the source cluster to the target cluster.

    Every call builds a fresh MigrationLedger and returns it. Items that fail are recorded in the
    ledger; an error outside per-item handling stops the run, logs the partial summary and raises
    FatalMigrationError carrying that ledger.
    """

    def __init__(self, source: Cluster, target: Cluster, settings: Optional[MigrationSettings] = None):
        self.source = source
        self.target = target
        self.settings = settings if settings is not None else MigrationSettings()
        self.transformer = PayloadTransformer(
            mapping_converter=MappingTypeConverter(self.settings.mapping_type_conversions),
            replica_count=self.settings.replica_count,
            refresh_interval=self.settings.refresh_interval
        )
        self.handlers = all_handlers(self.transformer)

    def migrate(self, kind: ResourceKind, selector: str) -> MigrationLedger:
        """
        Pattern strategy: enumerate the resources matching `selector` (a wildcard pattern for
        indices and templates, a comma-separated id list for pipelines and scripts), then probe
        the target for each one right before writing it.
        """
        handler = self.handlers[kind]
        ledger = MigrationLedger(title=f"{kind.label} Migration")

        def run():
            resources = handler.enumerate(self.source, selector)
            if not resources:
                logger.info(f"No {kind.label.lower()} resources found for '{selector}'")
                return
            logger.info(f"Found {len(resources)} {kind.label.lower()} resources for '{selector}'")
            executor = BatchExecutor(self.source, self.target, handler, ledger, check_existence=True)
            executor.run(resources, self.settings.pattern_batch_size)

        return self._run_guarded(ledger, run)

    def migrate_indices(self, pattern: str) -> MigrationLedger:
        return self.migrate(ResourceKind.INDEX, pattern)

    def migrate_index_templates(self, pattern: str) -> MigrationLedger:
        return self.migrate(ResourceKind.INDEX_TEMPLATE, pattern)

    def migrate_ingest_pipelines(self, ids: str) -> MigrationLedger:
        return self.migrate(ResourceKind.INGEST_PIPELINE, ids)

    def migrate_stored_scripts(self, ids: str) -> MigrationLedger:
        return self.migrate(ResourceKind.STORED_SCRIPT, ids)

    def migrate_all_indices(self, confirm: Optional[ConfirmCallback] = None) -> MigrationLedger:
        """
        Diff strategy: list the visible indices on both sides once and migrate every source index
        the target lacks. No per-item existence probe is made; the diff is the plan.
        """
        ledger = MigrationLedger(title=ALL_INDICES_TITLE, show_plan=True)
        handler = self.handlers[ResourceKind.INDEX]
        excluded = self.settings.excluded_index_substrings

        def run():
            source_indices = enumerator.list_all_indices(self.source, excluded)
            target_indices = enumerator.list_all_indices(self.target, excluded)
            ledger.source_total = len(source_indices)
            ledger.target_total = len(target_indices)
            missing = source_indices.without(target_indices)
            if not missing:
                logger.info("No indices missing in target cluster, nothing to migrate")
                return
            logger.info(f"Found {len(missing)} indices missing in target cluster")
            if confirm is not None and not confirm(missing.names):
                logger.info("Migration cancelled before any index was written")
                ledger.aborted = True
                return
            executor = BatchExecutor(self.source, self.target, handler, ledger, check_existence=False)
            executor.run(missing, self.settings.all_indices_batch_size)

        return self._run_guarded(ledger, run)

    def _run_guarded(self, ledger: MigrationLedger, body: Callable[[], None]) -> MigrationLedger:
        try:
            body()
        except Exception as e:
            ledger.aborted = True
            logger.error(f"Fatal error during {ledger.title.lower()}: {type(e).__name__}: {e!s}")
            logger.info(ledger.render())
            raise FatalMigrationError(str(e), ledger=ledger) from e
        logger.info(ledger.render())
        return ledger
