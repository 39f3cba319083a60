import copy
import json
import logging
from typing import Optional

from resource_migrator.exceptions import TransformError
from resource_migrator.logic.mapping_converter import MappingTypeConverter

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"
MAPPINGS_KEY = "mappings"
ALIASES_KEY = "aliases"
INDEX_KEY = "index"
TEMPLATE_KEY = "template"
NUMBER_OF_REPLICAS_SETTING = "number_of_replicas"
REFRESH_INTERVAL_SETTING = "refresh_interval"
# Server-assigned index settings that a create-index request must not carry
INTERNAL_SETTINGS_KEYS = ("uuid", "creation_date", "provided_name", "version")
# Fields of a GET _scripts/<id> response that are not part of the script definition
SCRIPT_RESPONSE_KEYS = ("_id", "found")

DEFAULT_REPLICA_COUNT = "0"
DEFAULT_REFRESH_INTERVAL = "300s"

NO_SCRIPT_CONTENT = "no valid script content"


def parse_document(raw: Optional[str], empty_reason: str) -> dict:
    """Parse a fetched resource body into a dict, raising TransformError when there is nothing usable."""
    if raw is None or not raw.strip():
        raise TransformError(empty_reason)
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise TransformError(f"malformed document: {e!s}") from e
    if not isinstance(document, dict) or not document:
        raise TransformError(empty_reason)
    return document


class PayloadTransformer:
    """Turns fetched source documents into write payloads for the target cluster.

    Input documents are never mutated; every transform works on a deep copy.
    """

    def __init__(self, mapping_converter: Optional[MappingTypeConverter] = None,
                 replica_count: str = DEFAULT_REPLICA_COUNT,
                 refresh_interval: str = DEFAULT_REFRESH_INTERVAL):
        self.mapping_converter = mapping_converter if mapping_converter is not None else MappingTypeConverter()
        self.replica_count = replica_count
        self.refresh_interval = refresh_interval

    def normalize_index_settings(self, index_settings: Optional[dict]) -> dict:
        if index_settings is not None and not isinstance(index_settings, dict):
            raise TransformError("malformed document: settings.index is not an object")
        settings = copy.deepcopy(index_settings) if index_settings else {}
        for key in INTERNAL_SETTINGS_KEYS:
            settings.pop(key, None)
        # Forced whatever the source says: no replicas and a slow refresh while the target is bulk loaded
        settings[NUMBER_OF_REPLICAS_SETTING] = self.replica_count
        settings[REFRESH_INTERVAL_SETTING] = self.refresh_interval
        return settings

    def transform_index(self, name: str, document: dict) -> dict:
        """Build a create-index body from a GET /<index>/ response, which is keyed by index name."""
        index_data = document.get(name)
        if not isinstance(index_data, dict):
            raise TransformError("no data found in response")
        aliases = index_data.get(ALIASES_KEY)
        settings = index_data.get(SETTINGS_KEY)
        if settings is not None and not isinstance(settings, dict):
            raise TransformError("malformed document: settings is not an object")
        index_settings = (settings or {}).get(INDEX_KEY)
        payload = {
            ALIASES_KEY: copy.deepcopy(aliases) if isinstance(aliases, dict) else {},
            SETTINGS_KEY: {INDEX_KEY: self.normalize_index_settings(index_settings)},
        }
        mappings = index_data.get(MAPPINGS_KEY)
        if isinstance(mappings, dict):
            payload[MAPPINGS_KEY] = self.mapping_converter.convert(copy.deepcopy(mappings))
        return payload

    def transform_index_template(self, name: str, definition: Optional[dict]) -> dict:
        """Prepare a composable index template definition (the `index_template` object of a listing)."""
        if not isinstance(definition, dict) or not definition:
            raise TransformError("no template definition found")
        payload = copy.deepcopy(definition)
        template = payload.get(TEMPLATE_KEY)
        if isinstance(template, dict) and isinstance(template.get(MAPPINGS_KEY), dict):
            self.mapping_converter.convert(template[MAPPINGS_KEY])
        logger.debug(f"Prepared index template {name}")
        return payload

    def transform_ingest_pipeline(self, name: str, document: dict) -> dict:
        """Unwrap the pipeline definition from a GET _ingest/pipeline/<id> response, which is keyed by id."""
        definition = document.get(name)
        if not isinstance(definition, dict):
            raise TransformError("no pipeline definition found in response")
        return copy.deepcopy(definition)

    def transform_stored_script(self, name: str, document: dict) -> dict:
        """Strip the response-only fields of a GET _scripts/<id> response, keeping the script body."""
        if document.get("found") is False:
            raise TransformError(NO_SCRIPT_CONTENT)
        payload = {k: copy.deepcopy(v) for k, v in document.items() if k not in SCRIPT_RESPONSE_KEYS}
        if not payload:
            raise TransformError(NO_SCRIPT_CONTENT)
        return payload
