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

"""Per-root coverage store: static scan of the schema graph plus instrumentation."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple, Union

from ..config import coverage_config
from ..exceptions import IdentifierCollisionError, UnknownSchemaNodeError
from .identifier import SchemaPath, format_path, literal_key, resolve_child_id

logger = logging.getLogger(__name__)


class RuleOutcome(enum.IntFlag):
    """Accumulated outcome of a rule: failed at least once and/or passed at least once."""

    NONE = 0
    ERROR = 1
    PASS = 2
    FULL = 3

    @classmethod
    def parse(cls, result: Union["RuleOutcome", str]) -> "RuleOutcome":
        if isinstance(result, cls):
            return result
        try:
            return cls[str(result).upper()]
        except KeyError:
            raise ValueError(f"Unknown rule outcome: {result!r}") from None


@dataclass
class CoverageLog:
    """Mutable coverage record for one distinct schema node."""

    paths: List[SchemaPath] = field(default_factory=list)
    entry: bool = False
    rule: Dict[str, RuleOutcome] = field(default_factory=dict)
    # Observed literals, stored as literal_key() tuples
    valid: Set[Any] = field(default_factory=set)
    invalid: Set[Any] = field(default_factory=set)

    def add_path(self, path: SchemaPath) -> None:
        if path and path not in self.paths:
            self.paths.append(path)


@dataclass(frozen=True)
class IdentifierCollision:
    path: SchemaPath
    first: Any
    second: Any


class Store:
    """Coverage logs for every node reachable from one schema root.

    The topology is fixed by the scan in the constructor; afterwards only
    :meth:`entry`, :meth:`log` and :meth:`value` mutate the logs.
    """

    def __init__(self, root: Any, strict_ids: Optional[bool] = None):
        self.root = root
        self.strict_ids = coverage_config.strict_ids if strict_ids is None else strict_ids
        self.collisions: List[IdentifierCollision] = []

        # id(node) -> (node, log); holding the node keeps its id stable
        self._logs: Dict[int, Tuple[Any, CoverageLog]] = {}
        self._path_owners: Dict[SchemaPath, int] = {}

        self._scan(root, ())
        logger.debug(f"Scanned schema {type(root).__name__}: {len(self._logs)} nodes")

    def __len__(self) -> int:
        return len(self._logs)

    def __contains__(self, node: Any) -> bool:
        return id(node) in self._logs

    def items(self) -> Iterator[Tuple[Any, CoverageLog]]:
        """Iterate ``(node, log)`` pairs in scan order."""
        return iter(self._logs.values())

    def get(self, node: Any) -> CoverageLog:
        try:
            return self._logs[id(node)][1]
        except KeyError:
            raise UnknownSchemaNodeError(
                f"Schema node {type(node).__name__} was not discovered by the scan of this root"
            ) from None

    # Instrumentation

    def entry(self, node: Any) -> None:
        self.get(node).entry = True

    def log(self, source: str, name: str, result: Union[RuleOutcome, str], node: Any) -> None:
        if source != "rule":
            raise ValueError(f"Unknown outcome source: {source!r}")
        record = self.get(node)
        record.rule[name] = record.rule.get(name, RuleOutcome.NONE) | RuleOutcome.parse(result)

    def value(self, source: str, value: Any, node: Any) -> None:
        if source not in ("valid", "invalid"):
            raise ValueError(f"Unknown value source: {source!r}")
        getattr(self.get(node), source).add(literal_key(value))

    # Scan

    def _scan(self, node: Any, path: SchemaPath) -> None:
        key = id(node)
        if key not in self._logs:
            self._logs[key] = (node, CoverageLog())

        if path:
            self._claim(path, key, node)
        self._logs[key][1].add_path(path)

        for child in node.children():
            self._scan(child.node, path + (resolve_child_id(child),))

    def _claim(self, path: SchemaPath, key: int, node: Any) -> None:
        owner = self._path_owners.setdefault(path, key)
        if owner == key:
            return

        first = self._logs[owner][0]
        collision = IdentifierCollision(path=path, first=first, second=node)
        if collision in self.collisions:
            return

        message = (
            f"Schema nodes {type(first).__name__} and {type(node).__name__} "
            f"both resolve to path {format_path(path)}"
        )
        if self.strict_ids:
            raise IdentifierCollisionError(message)

        logger.warning(message)
        self.collisions.append(collision)
