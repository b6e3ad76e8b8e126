# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Build schema nodes from YAML schema definition documents.

A definition document holds a root ``schema`` node and optional named
``definitions``. Every ``{ref: <name>}`` resolves to the same node instance,
so a definition used as an array item, an alternative or a ``has`` argument
becomes a shared node in the schema graph. Object keys hold keyed copies.
"""

import json
import re
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema
from jsonschema.exceptions import best_match

from ..exceptions import SchemaDefinitionError
from ..file_io.source_location import SourceLocation, format_source, lookup_source
from .parsing.yaml_parser import SourceMap, yaml_parser
from .schema import (
    AlternativesSchema,
    AnySchema,
    ArraySchema,
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
)

logger = logging.getLogger(__name__)


# Schema cache to avoid reloading files
_SCHEMA_CACHE: Dict[str, dict] = {}

_NODE_TYPES = {
    "any": AnySchema,
    "string": StringSchema,
    "number": NumberSchema,
    "boolean": BooleanSchema,
    "object": ObjectSchema,
    "array": ArraySchema,
    "alternatives": AlternativesSchema,
}

_TYPE_RULES = {
    "string": ("min", "max", "pattern"),
    "number": ("min", "max", "integer"),
    "array": ("min", "max", "has"),
}


def get_definition_schema_path() -> Path:
    return Path(__file__).parent.parent / "schema" / "schema_definition.json"


def load_definition_schema() -> dict:
    """Load the JSON Schema describing schema definition documents.

    Raises:
        FileNotFoundError: If the bundled schema file is missing
        json.JSONDecodeError: If the bundled schema file is invalid JSON
    """
    cache_key = "schema_definition"
    if cache_key in _SCHEMA_CACHE:
        return _SCHEMA_CACHE[cache_key]

    schema_path = get_definition_schema_path()
    with open(schema_path, "r", encoding="utf-8") as f:
        schema = json.load(f)

    _SCHEMA_CACHE[cache_key] = schema
    return schema


def clear_cache() -> None:
    """Clear the schema cache. Useful for testing."""
    _SCHEMA_CACHE.clear()


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


class SchemaLoader:
    """Turn one parsed definition document into schema nodes."""

    def __init__(
        self,
        document: Any,
        source_map: Optional[SourceMap] = None,
        file_path: Optional[Path] = None,
    ):
        self.document = document
        self.source_map = source_map
        self.file_path = file_path
        self._definitions: Dict[str, AnySchema] = {}
        self._building: List[str] = []

    def _error(self, message: str, yaml_path: str) -> SchemaDefinitionError:
        loc = lookup_source(self.source_map, yaml_path)
        src = SourceLocation(file_path=self.file_path, yaml_path=yaml_path or "/", line=loc.line, column=loc.column)
        return SchemaDefinitionError(f"{message}{format_source(src)}")

    def check(self) -> None:
        """Validate the document against the bundled definition JSON Schema."""
        validator = jsonschema.Draft7Validator(load_definition_schema())
        error = best_match(validator.iter_errors(self.document))
        if error is None:
            return

        path = "/" + "/".join(_jp_escape(str(p)) for p in error.absolute_path) if error.absolute_path else ""
        raise self._error(f"Invalid schema definition: {error.message}", path)

    def build(self) -> AnySchema:
        """Validate the document and build its root schema node."""
        self.check()
        return self._build_node(self.document["schema"], "/schema")

    def _resolve_ref(self, name: str, yaml_path: str) -> AnySchema:
        if name in self._definitions:
            return self._definitions[name]

        definitions = self.document.get("definitions") or {}
        if name not in definitions:
            raise self._error(f"Unknown definition '{name}'", yaml_path)

        if name in self._building:
            chain = " -> ".join(self._building + [name])
            raise self._error(f"Recursive definition: {chain}", yaml_path)

        self._building.append(name)
        try:
            node = self._build_node(definitions[name], f"/definitions/{_jp_escape(name)}")
        finally:
            self._building.pop()

        self._definitions[name] = node
        return node

    def _build_node(self, spec: Dict[str, Any], yaml_path: str) -> AnySchema:
        if "ref" in spec:
            return self._resolve_ref(spec["ref"], f"{yaml_path}/ref")

        kind = spec.get("type", "any")
        node = _NODE_TYPES[kind]()

        if kind == "object":
            children = {
                key: self._build_node(child, f"{yaml_path}/keys/{_jp_escape(key)}")
                for key, child in (spec.get("keys") or {}).items()
            }
            if children:
                node = node.keys(children)
            if "unknown" in spec:
                node = node.unknown(spec["unknown"])
        elif kind == "array":
            node = node.items(*self._build_list(spec.get("items"), f"{yaml_path}/items"))
        elif kind == "alternatives":
            node = node.try_(*self._build_list(spec.get("try"), f"{yaml_path}/try"))

        node = self._apply_rules(node, kind, spec.get("rules") or {}, f"{yaml_path}/rules")

        if spec.get("allow"):
            node = node.allow(*spec["allow"])
        if spec.get("valid"):
            node = node.valid(*spec["valid"])
        if spec.get("invalid"):
            node = node.invalid(*spec["invalid"])

        if spec.get("required"):
            node = node.required()
        if "default" in spec:
            node = node.default(spec["default"])
        if "failover" in spec:
            node = node.failover(spec["failover"])
        if "id" in spec:
            node = node.id(spec["id"])

        return node

    def _build_list(self, specs: Optional[List[Dict[str, Any]]], yaml_path: str) -> List[AnySchema]:
        return [self._build_node(item, f"{yaml_path}/{idx}") for idx, item in enumerate(specs or [])]

    def _apply_rules(self, node: AnySchema, kind: str, rules: Dict[str, Any], yaml_path: str) -> AnySchema:
        allowed = _TYPE_RULES.get(kind, ())
        for name, arg in rules.items():
            rule_path = f"{yaml_path}/{_jp_escape(name)}"
            if name not in allowed:
                raise self._error(f"Rule '{name}' is not supported by type '{kind}'", rule_path)

            if name == "integer":
                if arg:
                    node = node.integer()
            elif name == "has":
                node = node.has(self._build_node(arg, rule_path))
            elif name == "pattern":
                try:
                    node = node.pattern(arg)
                except re.error as e:
                    raise self._error(f"Invalid pattern {arg!r}: {e}", rule_path) from e
            else:
                node = getattr(node, name)(arg)
        return node


def build_schema(document: Any, source_map: Optional[SourceMap] = None, file_path: Optional[Path] = None) -> AnySchema:
    """Build the root schema node of a parsed definition document."""
    return SchemaLoader(document, source_map=source_map, file_path=file_path).build()


def load_schema_definition(file_path: Union[str, Path]) -> AnySchema:
    """Load a YAML schema definition file and build its root schema node.

    Args:
        file_path: Path to the YAML definition

    Returns:
        Root schema node

    Raises:
        SchemaDefinitionError: If the file cannot be parsed or is not a valid definition
    """
    path = Path(file_path)
    document, source_map = yaml_parser.load_with_source(path)
    schema = build_schema(document, source_map=source_map, file_path=path)
    logger.debug(f"Loaded schema definition: {path}")
    return schema
