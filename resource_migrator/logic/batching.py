import logging
import os
from datetime import datetime
from typing import Optional, Sequence

from resource_migrator.logic.enumerator import DEFAULT_EXCLUDED_SUBSTRINGS, list_all_indices
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.resource_set import make_batches

logger = logging.getLogger(__name__)

DEFAULT_INDEX_BATCH_SIZE = 400
BATCH_FILE_PREFIX = "IndexBatches_"
BATCH_SEPARATOR = "=" * 5


def batch_file_name(now: Optional[datetime] = None) -> str:
    now = now if now is not None else datetime.now()
    return f"{BATCH_FILE_PREFIX}{now.strftime('%Y%m%d_%H%M%S')}.txt"


def generate_index_batches(cluster: Cluster, output_dir: str = ".", batch_size: int = DEFAULT_INDEX_BATCH_SIZE,
                           excluded_substrings: Sequence[str] = DEFAULT_EXCLUDED_SUBSTRINGS,
                           now: Optional[datetime] = None) -> Optional[str]:
    """
    Write the visible indices of `cluster`, sorted by name, to a text file as comma-separated
    batches separated by a rule line, so the batches can be fed to an external reindex job.
    Returns the path of the written file, or None when there is nothing to write.
    """
    indices = list_all_indices(cluster, excluded_substrings).sorted()
    if not indices:
        logger.info(f"No indices found in {cluster.name} cluster, no batch file written")
        return None
    batches = make_batches(indices.names, batch_size)
    path = os.path.join(output_dir, batch_file_name(now))
    with open(path, "w") as f:
        for number, batch in enumerate(batches, start=1):
            if number > 1:
                f.write(f"{BATCH_SEPARATOR}\n")
            f.write(",".join(batch) + "\n")
    logger.info(f"Wrote {len(indices)} indices in {len(batches)} batches to {path}")
    return path
