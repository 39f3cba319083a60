import logging
from typing import Optional

from resource_migrator.exceptions import RequestError, TransformError
from resource_migrator.logic.existence import resource_exists
from resource_migrator.logic.handlers import ResourceHandler
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.migration_ledger import MigrationLedger
from resource_migrator.models.resource_set import ResourceSet, make_batches

logger = logging.getLogger(__name__)


class BatchExecutor:
    """
    Drives a planned set of resources through existence check, fetch, transform and write.

    Items are processed strictly in plan order, one at a time. Batches only group items for
    progress reporting. A request failure, or a source document that is missing, unparseable or
    of an unexpected shape, is recorded against its item and the run moves on; any other error is
    fatal and propagates with the ledger left as it was.
    """

    def __init__(self, source: Cluster, target: Cluster, handler: ResourceHandler,
                 ledger: MigrationLedger, check_existence: bool = True):
        self.source = source
        self.target = target
        self.handler = handler
        self.ledger = ledger
        self.check_existence = check_existence

    @property
    def label(self) -> str:
        return self.handler.kind.label.lower()

    def run(self, resources: ResourceSet, batch_size: Optional[int]) -> MigrationLedger:
        self.ledger.plan(resources.names)
        batches = make_batches(resources.names, batch_size)
        for number, batch in enumerate(batches, start=1):
            logger.info(f"Processing {self.label} batch {number} of {len(batches)} ({len(batch)} items)")
            for name in batch:
                self.migrate_item(name, resources)
        return self.ledger

    def migrate_item(self, name: str, resources: ResourceSet):
        if self.check_existence:
            logger.info(f"Checking {self.label}: {name}")
            if resource_exists(self.target, self.handler.kind, name):
                logger.info(f"{self.handler.kind.label} {name} already exists in target cluster, skipping")
                self.ledger.record_skipped(name)
                return

        logger.info(f"Migrating {self.label}: {name}")
        try:
            document = self.handler.fetch(self.source, name, resources)
            payload = self.handler.transform(name, document)
        except TransformError as e:
            logger.error(f"Failed to prepare {self.label} {name}: {e.reason}")
            self.ledger.record_failed(name, e.reason)
            return
        except RequestError as e:
            logger.error(f"Failed to fetch {self.label} {name} from source cluster: {e!s}")
            self.ledger.record_failed(name, f"fetch from source failed: {e!s}")
            return
        except (AttributeError, TypeError) as e:
            # Valid JSON of an unexpected shape
            logger.error(f"Failed to prepare {self.label} {name}: malformed document: {e!s}")
            self.ledger.record_failed(name, f"malformed document: {e!s}")
            return

        try:
            self.target.put(self.handler.kind.write_path(name), payload)
        except RequestError as e:
            logger.error(f"Failed to create {self.label} {name} in target cluster: {e!s}")
            self.ledger.record_failed(name, str(e))
            return
        logger.info(f"Successfully migrated {self.label}: {name}")
        self.ledger.record_migrated(name)
