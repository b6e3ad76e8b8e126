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

"""Coverage gap reporting.

Reduces the logs accumulated in each registered store into the smallest list of
gaps that still names every untested branch: once a node is reported as never
reached, nothing below it is reported again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Union

from .identifier import SchemaPath, format_path, literal_key
from .store import CoverageLog, RuleOutcome, Store


NEVER_REACHED = "never reached"

OUTCOME_LABELS = {
    RuleOutcome.NONE: "never used",
    RuleOutcome.ERROR: "always error",
    RuleOutcome.PASS: "always pass",
}

FLAG_RULES = ("default", "failover")


@dataclass
class MissingItem:
    """A single coverage gap inside one schema."""

    status: Union[str, List[Any]]
    rule: Optional[str] = None
    paths: Optional[List[SchemaPath]] = None

    @property
    def message(self) -> str:
        label = ""
        if self.paths is not None:
            label = format_path(self.paths[0]) if self.paths else "<root>"
            if self.rule:
                label += ":"

        if isinstance(self.status, list):
            status = ", ".join(repr(value) for value in self.status)
        else:
            status = self.status

        return f"{label}{self.rule or ''} ({status})"

    def to_dict(self) -> dict:
        item: dict = {}
        if self.rule is not None:
            item["rule"] = self.rule
        item["status"] = list(self.status) if isinstance(self.status, list) else self.status
        if self.paths is not None:
            item["paths"] = [_path_to_list(path) for path in self.paths]
        return item


@dataclass
class CoverageRecord:
    """Coverage gaps for one registered schema root."""

    file_path: Optional[Path]
    line: Optional[int]
    missing: List[MissingItem] = field(default_factory=list)
    severity: str = "error"

    @property
    def message(self) -> str:
        return "Schema missing tests for " + ", ".join(item.message for item in self.missing)

    def to_dict(self) -> dict:
        return {
            "filename": str(self.file_path) if self.file_path is not None else None,
            "line": self.line,
            "missing": [item.to_dict() for item in self.missing],
            "severity": self.severity,
            "message": self.message,
        }


def _path_to_list(path: SchemaPath) -> list:
    return [list(segment) if isinstance(segment, tuple) else segment for segment in path]


def _under_skipped(paths: Sequence[SchemaPath], skipped: Sequence[SchemaPath]) -> bool:
    for path in paths:
        for skip in skipped:
            if path[:len(skip)] == skip:
                return True
    return False


def _missing_values(node: Any, log: CoverageLog) -> List[MissingItem]:
    items: List[MissingItem] = []
    for kind in ("valid", "invalid"):
        declared = getattr(node, f"{kind}s", None) or ()
        if not declared:
            continue

        observed = getattr(log, kind)
        unseen = [value for value in declared if literal_key(value) not in observed]
        if unseen:
            items.append(MissingItem(status=unseen, rule=f"{kind}s"))
    return items


def _missing_rules(node: Any, log: CoverageLog) -> List[MissingItem]:
    names = list(node.rule_names)
    for flag in FLAG_RULES:
        if node.flags.get(flag) is not None:
            names.append(flag)

    items: List[MissingItem] = []
    for name in names:
        status = OUTCOME_LABELS.get(log.rule.get(name, RuleOutcome.NONE))
        if status is None:
            continue
        items.append(MissingItem(status=status, rule=name, paths=list(log.paths) or None))
    return items


def report_store(store: Store) -> List[MissingItem]:
    """Compute the coverage gaps of a single store."""
    missing: List[MissingItem] = []
    skipped: List[SchemaPath] = []

    for node, log in store.items():
        if _under_skipped(log.paths, skipped):
            continue

        if not log.entry:
            missing.append(MissingItem(status=NEVER_REACHED, paths=list(log.paths)))
            skipped.extend(log.paths)
            continue

        missing.extend(_missing_values(node, log))
        missing.extend(_missing_rules(node, log))

    return missing


def _same_file(left: Union[str, Path, None], right: Union[str, Path, None]) -> bool:
    if left is None or right is None:
        return False
    return Path(left).resolve() == Path(right).resolve()


def generate_report(registrations: Iterable[Any], file_path: Union[str, Path, None] = None) -> Optional[List[CoverageRecord]]:
    """Build coverage records for every registration with gaps.

    Args:
        registrations: Objects exposing ``file_path``, ``line`` and ``store``
        file_path: Only report schemas registered from this file

    Returns:
        List of CoverageRecord objects, or None when nothing is missing
    """
    coverage: List[CoverageRecord] = []

    for registration in registrations:
        if file_path is not None and not _same_file(file_path, registration.file_path):
            continue

        missing = report_store(registration.store)
        if missing:
            coverage.append(
                CoverageRecord(
                    file_path=registration.file_path,
                    line=registration.line,
                    missing=missing,
                )
            )

    return coverage or None
