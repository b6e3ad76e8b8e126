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

"""YAML loading for schema definitions and validation cases."""

import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from ...exceptions import SchemaDefinitionError

logger = logging.getLogger(__name__)

SourceMap = Dict[str, Dict[str, int]]


class YamlParser:
    """YAML parser that can also report where each value came from."""

    def __init__(self, cache_enabled: bool = False):
        self.cache_enabled = cache_enabled
        self._cache: Dict[Path, Tuple[Any, SourceMap]] = {}

    @staticmethod
    def _json_pointer_escape(token: str) -> str:
        # JSON Pointer escaping: "~" -> "~0", "/" -> "~1"
        return token.replace("~", "~0").replace("/", "~1")

    @classmethod
    def _build_source_map_from_yaml(cls, content: str) -> SourceMap:
        """Build a mapping from JSON-pointer-like paths to 1-based line/column.

        Uses PyYAML's node tree (yaml.compose) so locations are tracked without
        changing the data returned by safe_load.
        """
        source_map: SourceMap = {}

        try:
            root = yaml.compose(content, Loader=yaml.SafeLoader)
        except yaml.YAMLError:
            # Parse errors surface from safe_load instead
            return source_map

        if root is None:
            return source_map

        def _record(path: str, node) -> None:
            mark = getattr(node, "start_mark", None)
            if mark is None:
                return
            # PyYAML uses 0-based line/column
            source_map[path] = {"line": int(mark.line) + 1, "column": int(mark.column) + 1}

        def _walk(node, path: str) -> None:
            _record(path, node)

            if isinstance(node, yaml.nodes.MappingNode):
                for key_node, value_node in node.value:
                    key = getattr(key_node, "value", None)
                    if key is None:
                        continue
                    _walk(value_node, f"{path}/{cls._json_pointer_escape(str(key))}")
            elif isinstance(node, yaml.nodes.SequenceNode):
                for idx, item_node in enumerate(node.value):
                    _walk(item_node, f"{path}/{idx}")

        _walk(root, "")
        return source_map

    def load_with_source(self, file_path: Union[str, Path]) -> Tuple[Any, SourceMap]:
        """Load a YAML file and return (data, source_map).

        source_map keys are JSON-pointer-like paths (e.g. "/schema/keys/name").
        """
        path = Path(file_path)

        if not path.is_file():
            raise SchemaDefinitionError(f"YAML file not found: {path}")

        if self.cache_enabled and path in self._cache:
            logger.debug(f"Loading YAML from cache: {path}")
            return self._cache[path]

        logger.debug(f"Loading YAML file: {path}")
        content = path.read_text(encoding="utf-8")
        data, source_map = self.load_string_with_source(content, origin=str(path))

        if self.cache_enabled:
            self._cache[path] = (data, source_map)
        return data, source_map

    def load_string_with_source(self, content: str, origin: str = "<string>") -> Tuple[Any, SourceMap]:
        """Load YAML from string content and return (data, source_map)."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise SchemaDefinitionError(f"Failed to parse YAML {origin}: {exc}") from exc

        return data, self._build_source_map_from_yaml(content)

    def load(self, file_path: Union[str, Path]) -> Any:
        data, _ = self.load_with_source(file_path)
        return data


yaml_parser = YamlParser()
