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

"""Identifiers for schema nodes reached through a structural context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Tuple, Union


PathSegment = Union[str, Tuple[str, int]]
SchemaPath = Tuple[PathSegment, ...]


@dataclass(frozen=True)
class ChildRef:
    """One immediate sub-node as enumerated by its parent.

    ``source`` names the structural role ("terms", "keys", "rules", ...),
    ``name`` the term or rule that holds the child and ``path`` the location of
    the child inside the parent definition, e.g. ``("items", 0)``.
    """

    node: Any
    source: str
    name: str
    path: Tuple[Any, ...] = field(default_factory=tuple)


def resolve_id(node: Any, source: str, name: str, path: Tuple[Any, ...]) -> PathSegment:
    """Resolve the path segment identifying ``node`` under its parent."""
    flags = node.flags

    if flags.get("id") is not None:
        return flags["id"]

    if flags.get("_key") is not None:
        return flags["_key"]

    synthesized = f"@{name}"

    # Alternatives sharing a term name stay apart by position
    if source == "terms":
        return (synthesized, path[1])

    return synthesized


def resolve_child_id(child: ChildRef) -> PathSegment:
    return resolve_id(child.node, child.source, child.name, child.path)


def literal_key(value: Any) -> Tuple[bool, Any]:
    """Hashable identity of a literal; booleans never equal the numbers 0 and 1."""
    return (isinstance(value, bool), value)


def format_path(path: SchemaPath) -> str:
    """Render a path as a dotted label; positional alternative segments are omitted.

    A path with no named segment renders as ``<root>``.
    """
    label = ""
    for segment in path:
        if isinstance(segment, tuple):
            continue

        if isinstance(segment, int):
            label += f"[{segment}]"
            continue

        if label:
            label += "."
        label += str(segment)

    return label or "<root>"
