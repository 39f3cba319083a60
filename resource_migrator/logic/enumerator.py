import json
import logging
from typing import Iterable, List, Sequence

from resource_migrator.exceptions import EnumerationError, NotFoundError, RequestError
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.resource_set import ResourceSet

logger = logging.getLogger(__name__)

# Substrings that hide an index from the "all indices" universe: beats data, system-internal
# (dotted) indices and metric indices
DEFAULT_EXCLUDED_SUBSTRINGS = ("filebeat", ".", "metric")

ALL_INDICES_PATH = "/_cat/indices?h=i&format=json"
ALL_INDICES_NAME_FIELD = "i"
PATTERN_INDICES_NAME_FIELD = "index"
INDEX_TEMPLATES_KEY = "index_templates"
INDEX_TEMPLATE_KEY = "index_template"
NAME_KEY = "name"


def apply_exclusions(names: Iterable[str], excluded_substrings: Sequence[str] = DEFAULT_EXCLUDED_SUBSTRINGS) \
        -> List[str]:
    remaining = list(names)
    # Applied one predicate at a time, each removing every name that contains the substring
    for substring in excluded_substrings:
        remaining = [name for name in remaining if substring not in name]
    return remaining


def parse_id_list(ids: str) -> ResourceSet:
    """Turn a comma-separated id list into a ResourceSet, ignoring blanks and repeats."""
    if not ids:
        return ResourceSet()
    return ResourceSet([i.strip() for i in ids.split(",") if i.strip()])


def _get_json(cluster: Cluster, path: str):
    raw = cluster.get(path)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise EnumerationError(f"Unparseable listing response from {cluster.name} cluster: {e!s}") from e


def _names_from_cat_response(body, name_field: str) -> List[str]:
    if body is None:
        return []
    if not isinstance(body, list):
        raise EnumerationError("Expected a JSON array from the _cat/indices API")
    return [entry[name_field] for entry in body if isinstance(entry, dict) and entry.get(name_field)]


def list_all_indices(cluster: Cluster,
                     excluded_substrings: Sequence[str] = DEFAULT_EXCLUDED_SUBSTRINGS) -> ResourceSet:
    """All visible indices of a cluster. Fails soft: any error yields an empty set."""
    try:
        names = _names_from_cat_response(_get_json(cluster, ALL_INDICES_PATH), ALL_INDICES_NAME_FIELD)
    except (RequestError, EnumerationError) as e:
        logger.error(f"Error fetching indices from {cluster.name} cluster: {e!s}")
        return ResourceSet()
    visible = apply_exclusions(names, excluded_substrings)
    logger.info(f"Found {len(visible)} visible indices in {cluster.name} cluster "
                f"({len(names) - len(visible)} excluded)")
    return ResourceSet(visible)


def list_indices_by_pattern(cluster: Cluster, pattern: str) -> ResourceSet:
    """Indices matching a wildcard pattern. Fails soft: any error yields an empty set."""
    try:
        body = _get_json(cluster, f"/_cat/indices/{pattern}?format=json")
        return ResourceSet(_names_from_cat_response(body, PATTERN_INDICES_NAME_FIELD))
    except NotFoundError:
        logger.info(f"No indices match pattern '{pattern}' in {cluster.name} cluster")
    except (RequestError, EnumerationError) as e:
        logger.error(f"Error fetching index names for pattern '{pattern}' from {cluster.name} cluster: {e!s}")
    return ResourceSet()


def list_index_templates(cluster: Cluster, pattern: str) -> ResourceSet:
    """Composable index templates matching a pattern, with their definitions embedded.
    Fails soft: any error yields an empty set.
    """
    try:
        body = _get_json(cluster, f"/_index_template/{pattern}")
    except NotFoundError:
        logger.info(f"No index templates match pattern '{pattern}' in {cluster.name} cluster")
        return ResourceSet()
    except (RequestError, EnumerationError) as e:
        logger.error(f"Error fetching index templates for pattern '{pattern}' from {cluster.name} cluster: {e!s}")
        return ResourceSet()
    if not isinstance(body, dict) or not isinstance(body.get(INDEX_TEMPLATES_KEY), list):
        return ResourceSet()
    names = []
    embedded = {}
    for template in body[INDEX_TEMPLATES_KEY]:
        if not isinstance(template, dict) or not template.get(NAME_KEY):
            continue
        names.append(template[NAME_KEY])
        if isinstance(template.get(INDEX_TEMPLATE_KEY), dict):
            embedded[template[NAME_KEY]] = template[INDEX_TEMPLATE_KEY]
    return ResourceSet(names, embedded)
