import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

TYPE_KEY = "type"
DOC_VALUES_KEY = "doc_values"
WILDCARD_TYPE = "wildcard"

# Source field types that the target engine names differently
DEFAULT_TYPE_CONVERSIONS = {
    "flattened": "flat_object",
}


class MappingTypeConverter:
    """Rewrites field types in a mapping tree so it is accepted by the target engine.

    The walk visits every object in the tree. An object whose `type` attribute is a string is a
    field definition: its type is replaced when the conversion table has an entry for it, and a
    `wildcard` field additionally gets `doc_values: true` so it stays aggregatable on the target.
    Objects that merely contain a field *named* "type" (e.g. `properties.type`) hold a dict under
    that key and are only descended into.
    """

    def __init__(self, conversions: Optional[Dict[str, str]] = None):
        self._conversions = dict(DEFAULT_TYPE_CONVERSIONS)
        if conversions:
            self._conversions.update(conversions)

    def register_conversion(self, source_type: str, target_type: str):
        self._conversions[source_type] = target_type

    def convert(self, mappings):
        """Convert `mappings` in place and return it."""
        if mappings is not None:
            self._visit(mappings, path="")
        return mappings

    def _visit(self, node, path: str):
        if isinstance(node, dict):
            if isinstance(node.get(TYPE_KEY), str):
                self._convert_field(node, path)
            for key, child in node.items():
                self._visit(child, f"{path}.{key}" if path else key)
        elif isinstance(node, list):
            for position, child in enumerate(node):
                self._visit(child, f"{path}[{position}]")

    def _convert_field(self, field_definition: dict, path: str):
        current_type = field_definition[TYPE_KEY]
        new_type = self._conversions.get(current_type)
        if new_type is not None and new_type != current_type:
            logger.info(f"Converting mapping type '{current_type}' to '{new_type}' at '{path or '<root>'}'")
            field_definition[TYPE_KEY] = new_type
        if current_type == WILDCARD_TYPE:
            field_definition[DOC_VALUES_KEY] = True
            logger.info(f"Set doc_values: true on wildcard field at '{path or '<root>'}'")
