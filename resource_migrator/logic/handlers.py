from abc import ABC, abstractmethod
from typing import Dict, Optional

from resource_migrator.exceptions import NotFoundError, TransformError
from resource_migrator.logic import enumerator
from resource_migrator.logic.transformer import NO_SCRIPT_CONTENT, PayloadTransformer, parse_document
from resource_migrator.models.cluster import Cluster
from resource_migrator.models.resource_kind import ResourceKind
from resource_migrator.models.resource_set import ResourceSet


class ResourceHandler(ABC):
    """The kind-specific pieces of a migration: how candidates are enumerated from a selector,
    how one resource is fetched from the source, and how it is turned into a write payload.
    Existence probing and writing are shared and driven by the kind's endpoint shape.
    """
    kind: ResourceKind
    # Failure reason when the source returns nothing usable for a resource
    empty_reason: str = "failed to retrieve resource details"

    def __init__(self, transformer: PayloadTransformer):
        self.transformer = transformer

    @abstractmethod
    def enumerate(self, cluster: Cluster, selector: str) -> ResourceSet:
        pass

    def fetch(self, cluster: Cluster, name: str, resources: ResourceSet) -> dict:
        return parse_document(cluster.get(self.kind.fetch_path(name)), self.empty_reason)

    @abstractmethod
    def transform(self, name: str, document: dict) -> dict:
        pass


class IndexHandler(ResourceHandler):
    kind = ResourceKind.INDEX
    empty_reason = "failed to retrieve settings and mappings"

    def enumerate(self, cluster: Cluster, selector: str) -> ResourceSet:
        return enumerator.list_indices_by_pattern(cluster, selector)

    def transform(self, name: str, document: dict) -> dict:
        return self.transformer.transform_index(name, document)


class IndexTemplateHandler(ResourceHandler):
    kind = ResourceKind.INDEX_TEMPLATE
    empty_reason = "failed to retrieve template details"

    def enumerate(self, cluster: Cluster, selector: str) -> ResourceSet:
        return enumerator.list_index_templates(cluster, selector)

    def fetch(self, cluster: Cluster, name: str, resources: ResourceSet) -> dict:
        # The listing response already carries every definition
        embedded = resources.embedded_definition(name)
        if embedded is not None:
            return embedded
        document = super().fetch(cluster, name, resources)
        templates = document.get(enumerator.INDEX_TEMPLATES_KEY) or []
        if not isinstance(templates, list):
            raise TransformError(f"malformed document: {enumerator.INDEX_TEMPLATES_KEY} is not a list")
        for template in templates:
            if isinstance(template, dict) and template.get(enumerator.NAME_KEY) == name:
                return template.get(enumerator.INDEX_TEMPLATE_KEY)
        raise TransformError("no template definition found")

    def transform(self, name: str, document: dict) -> dict:
        return self.transformer.transform_index_template(name, document)


class IngestPipelineHandler(ResourceHandler):
    kind = ResourceKind.INGEST_PIPELINE
    empty_reason = "failed to retrieve pipeline details"

    def enumerate(self, cluster: Cluster, selector: str) -> ResourceSet:
        return enumerator.parse_id_list(selector)

    def transform(self, name: str, document: dict) -> dict:
        return self.transformer.transform_ingest_pipeline(name, document)


class StoredScriptHandler(ResourceHandler):
    kind = ResourceKind.STORED_SCRIPT
    empty_reason = NO_SCRIPT_CONTENT

    def enumerate(self, cluster: Cluster, selector: str) -> ResourceSet:
        return enumerator.parse_id_list(selector)

    def fetch(self, cluster: Cluster, name: str, resources: ResourceSet) -> dict:
        # A missing script answers 404 with a {"found": false} body
        try:
            return super().fetch(cluster, name, resources)
        except NotFoundError as e:
            raise TransformError(NO_SCRIPT_CONTENT) from e

    def transform(self, name: str, document: dict) -> dict:
        return self.transformer.transform_stored_script(name, document)


HANDLER_TYPES = {handler.kind: handler for handler in
                 (IndexHandler, IndexTemplateHandler, IngestPipelineHandler, StoredScriptHandler)}


def get_handler(kind: ResourceKind, transformer: Optional[PayloadTransformer] = None) -> ResourceHandler:
    return HANDLER_TYPES[kind](transformer if transformer is not None else PayloadTransformer())


def all_handlers(transformer: PayloadTransformer) -> Dict[ResourceKind, ResourceHandler]:
    return {kind: handler_type(transformer) for kind, handler_type in HANDLER_TYPES.items()}
