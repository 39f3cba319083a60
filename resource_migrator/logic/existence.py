import logging

from resource_migrator.exceptions import NotFoundError, RequestError
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.resource_kind import ResourceKind

logger = logging.getLogger(__name__)


def resource_exists(cluster: Cluster, kind: ResourceKind, name: str) -> bool:
    """Whether `name` is already present on `cluster`.

    A 404 means absent. Any other transport failure is also reported as absent, so an ambiguous
    probe leads to a (re-)write rather than a skip; it is logged as a warning to keep it
    distinguishable from a genuine absence.
    """
    try:
        response = cluster.get(kind.exists_path(name))
    except NotFoundError:
        logger.debug(f"{kind.label} {name} not found in {cluster.name} cluster")
        return False
    except RequestError as e:
        logger.warning(f"Error checking existence of {kind.label.lower()} {name} in {cluster.name} cluster, "
                       f"treating it as absent: {e!s}")
        return False
    return bool(response)
