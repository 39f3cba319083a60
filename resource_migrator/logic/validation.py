import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from resource_migrator.exceptions import NotFoundError
from resource_migrator.logic.enumerator import INDEX_TEMPLATE_KEY, INDEX_TEMPLATES_KEY, NAME_KEY
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.utils import has_differences, string_from_names

logger = logging.getLogger(__name__)

ALL_PIPELINES_PATH = "/_ingest/pipeline"


# Compares the definitions of one resource kind between a "source" cluster and
# a "target" cluster. Resources that exist on the source but not on the target
# are "missing in target". "Conflicting" resources are present on both clusters
# but their definitions differ.
@dataclass
class ValidationResult:
    title: str
    source_total: int = 0
    target_total: int = 0
    missing_in_target: List[str] = field(default_factory=list)
    identical: List[str] = field(default_factory=list)
    conflicting: List[str] = field(default_factory=list)

    @classmethod
    def compare(cls, title: str, source: Dict[str, dict], target: Dict[str, dict]) -> "ValidationResult":
        result = cls(title=title, source_total=len(source), target_total=len(target))
        for name in sorted(source.keys()):
            if name not in target:
                result.missing_in_target.append(name)
            elif has_differences(source[name], target[name]):
                result.conflicting.append(name)
            else:
                result.identical.append(name)
        return result

    def is_in_sync(self) -> bool:
        return not self.missing_in_target and not self.conflicting

    def to_dict(self) -> Dict:
        return {
            "title": self.title,
            "source_total": self.source_total,
            "target_total": self.target_total,
            "missing_in_target": self.missing_in_target,
            "identical": self.identical,
            "conflicting": self.conflicting,
        }

    def render(self) -> str:
        return "\n".join([
            f"{self.title}",
            f"Source: {self.source_total}, Target: {self.target_total}",
            f"Missing in target: {string_from_names(self.missing_in_target)}",
            f"Identical: {string_from_names(self.identical)}",
            f"Conflicting: {string_from_names(self.conflicting)}",
        ])


def _get_json_or_empty(cluster: Cluster, path: str) -> dict:
    # A 404 means the cluster has none; other failures propagate
    try:
        raw = cluster.get(path)
    except NotFoundError:
        return {}
    if not raw:
        return {}
    body = json.loads(raw)
    return body if isinstance(body, dict) else {}


def fetch_index_templates(cluster: Cluster, pattern: str) -> Dict[str, dict]:
    body = _get_json_or_empty(cluster, f"/_index_template/{pattern}")
    return {template[NAME_KEY]: template.get(INDEX_TEMPLATE_KEY)
            for template in body.get(INDEX_TEMPLATES_KEY) or []
            if isinstance(template, dict) and template.get(NAME_KEY)}


def fetch_ingest_pipelines(cluster: Cluster) -> Dict[str, dict]:
    # The listing is already keyed by pipeline id
    return _get_json_or_empty(cluster, ALL_PIPELINES_PATH)


def validate_index_templates(source: Cluster, target: Cluster, pattern: str) -> ValidationResult:
    result = ValidationResult.compare("Index Template Validation",
                                      fetch_index_templates(source, pattern),
                                      fetch_index_templates(target, pattern))
    logger.info(f"Index templates missing in target: {string_from_names(result.missing_in_target)}")
    logger.info(f"Conflicting index templates: {string_from_names(result.conflicting)}")
    return result


def validate_ingest_pipelines(source: Cluster, target: Cluster) -> ValidationResult:
    result = ValidationResult.compare("Ingest Pipeline Validation",
                                      fetch_ingest_pipelines(source),
                                      fetch_ingest_pipelines(target))
    logger.info(f"Ingest pipelines missing in target: {string_from_names(result.missing_in_target)}")
    logger.info(f"Conflicting ingest pipelines: {string_from_names(result.conflicting)}")
    return result
