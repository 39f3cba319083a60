from enum import Enum


class ResourceKind(Enum):
    """The categories of cluster objects that can be migrated.

    Each kind knows the REST path of a single named resource; the same path is used to fetch
    the resource from the source, to probe for it on the target and to write it to the target.
    Indices are the exception: they are probed through their `_settings` sub-resource and
    fetched with a trailing slash.
    """
    INDEX = "index"
    INDEX_TEMPLATE = "index_template"
    INGEST_PIPELINE = "ingest_pipeline"
    STORED_SCRIPT = "stored_script"

    @property
    def label(self) -> str:
        return _LABELS[self]

    def resource_path(self, name: str) -> str:
        return _PATH_PREFIXES[self] + name

    def fetch_path(self, name: str) -> str:
        if self is ResourceKind.INDEX:
            return f"/{name}/"
        return self.resource_path(name)

    def exists_path(self, name: str) -> str:
        if self is ResourceKind.INDEX:
            return f"/{name}/_settings"
        return self.resource_path(name)

    def write_path(self, name: str) -> str:
        return self.resource_path(name)


_PATH_PREFIXES = {
    ResourceKind.INDEX: "/",
    ResourceKind.INDEX_TEMPLATE: "/_index_template/",
    ResourceKind.INGEST_PIPELINE: "/_ingest/pipeline/",
    ResourceKind.STORED_SCRIPT: "/_scripts/",
}

_LABELS = {
    ResourceKind.INDEX: "Index",
    ResourceKind.INDEX_TEMPLATE: "Index Template",
    ResourceKind.INGEST_PIPELINE: "Ingest Pipeline",
    ResourceKind.STORED_SCRIPT: "Stored Script",
}
