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

"""Reference validation engine.

Walks a schema node against an input value, collecting issues the way the
structure linter collects schema issues, and reports every visit, rule outcome
and matched literal to the coverage store of the traced root.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import coverage_config
from ..coverage.identifier import literal_key
from ..coverage.store import RuleOutcome, Store
from ..coverage.tracer import Tracer, get_active_tracer
from ..exceptions import ValidationError
from ..file_io.source_location import SourceLocation, capture_location
from ..models.schema import (
    MISSING,
    AlternativesSchema,
    AnySchema,
    ArraySchema,
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    Rule,
    StringSchema,
)

logger = logging.getLogger(__name__)


JsonPointer = str


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    path: JsonPointer = ""


@dataclass
class ValidationResult:
    value: Any
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _jp_escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _join_path(base: JsonPointer, token: Any) -> JsonPointer:
    return f"{base}/{_jp_escape(str(token))}"


def _same_literal(value: Any, literal: Any) -> bool:
    return bool(literal_key(value) == literal_key(literal))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_TYPE_CHECKS: Dict[type, Callable[[Any], bool]] = {
    StringSchema: lambda value: isinstance(value, str),
    NumberSchema: _is_number,
    BooleanSchema: lambda value: isinstance(value, bool),
    ObjectSchema: lambda value: isinstance(value, dict),
    ArraySchema: lambda value: isinstance(value, list),
}


def _limit_rule(measure: Callable[[Any], Any], compare: Callable[[Any, Any], bool]) -> Callable[[Rule, Any], bool]:
    def _check(rule: Rule, value: Any) -> bool:
        return compare(measure(value), rule.args["limit"])
    return _check


_RULE_CHECKS: Dict[Tuple[str, str], Callable[[Rule, Any], bool]] = {
    ("string", "min"): _limit_rule(len, lambda size, limit: size >= limit),
    ("string", "max"): _limit_rule(len, lambda size, limit: size <= limit),
    ("string", "pattern"): lambda rule, value: rule.args["regex"].search(value) is not None,
    ("number", "min"): _limit_rule(lambda value: value, lambda value, limit: value >= limit),
    ("number", "max"): _limit_rule(lambda value: value, lambda value, limit: value <= limit),
    ("number", "integer"): lambda rule, value: float(value).is_integer(),
    ("array", "min"): _limit_rule(len, lambda size, limit: size >= limit),
    ("array", "max"): _limit_rule(len, lambda size, limit: size <= limit),
}


class Validator:
    """Validate values against schema nodes, feeding a coverage tracer."""

    def __init__(self, tracer: Optional[Tracer] = None, location_depth: Optional[int] = None):
        self.tracer = tracer
        self.location_depth = coverage_config.location_depth if location_depth is None else location_depth

    def validate(self, schema: AnySchema, value: Any) -> ValidationResult:
        """Validate ``value`` against ``schema``.

        Args:
            schema: Root schema node
            value: Input value; ``MISSING`` stands for an absent value

        Returns:
            ValidationResult with the (possibly defaulted) value and all issues
        """
        location = capture_location(depth=self.location_depth)
        return self._run(schema, value, location)

    def attempt(self, schema: AnySchema, value: Any) -> Any:
        """Validate ``value`` and return it, raising ValidationError on failure."""
        location = capture_location(depth=self.location_depth)
        result = self._run(schema, value, location)
        if not result.ok:
            details = "; ".join(f"{issue.path or '/'}: {issue.message}" for issue in result.issues)
            raise ValidationError(f"Validation failed: {details}", result.issues)
        return result.value

    def _run(self, schema: AnySchema, value: Any, location: SourceLocation) -> ValidationResult:
        tracer = self.tracer if self.tracer is not None else get_active_tracer()
        store = tracer.register(schema, location=location) if tracer is not None else None

        value, issues = self._walk(schema, value, "", store)
        return ValidationResult(value=value, issues=issues)

    def _walk(
        self, node: AnySchema, value: Any, path: JsonPointer, store: Optional[Store]
    ) -> Tuple[Any, List[ValidationIssue]]:
        if store is not None:
            store.entry(node)

        value, issues = self._check(node, value, path, store)

        failover = node.flags.get("failover")
        if issues and failover is not None:
            if store is not None:
                store.log("rule", "failover", RuleOutcome.FULL, node)
            logger.debug(f"Failover applied at {path or '/'} after {len(issues)} issue(s)")
            return copy.deepcopy(failover), []

        return value, issues

    def _check(
        self, node: AnySchema, value: Any, path: JsonPointer, store: Optional[Store]
    ) -> Tuple[Any, List[ValidationIssue]]:
        if value is MISSING:
            default = node.flags.get("default")
            if default is not None:
                if store is not None:
                    store.log("rule", "default", RuleOutcome.FULL, node)
                return copy.deepcopy(default), []
            if node.is_required:
                return value, [ValidationIssue("any.required", "Missing required value", path)]
            return value, []

        for literal in node.invalids:
            if _same_literal(value, literal):
                if store is not None:
                    store.value("invalid", literal, node)
                return value, [ValidationIssue("any.invalid", f"Value {value!r} is not allowed", path)]

        for literal in node.valids:
            if _same_literal(value, literal):
                if store is not None:
                    store.value("valid", literal, node)
                return value, []

        if node.flags.get("only"):
            allowed = ", ".join(repr(literal) for literal in node.valids)
            return value, [ValidationIssue("any.only", f"Value must be one of: {allowed}", path)]

        if isinstance(node, AlternativesSchema):
            return self._check_alternatives(node, value, path, store)

        type_check = _TYPE_CHECKS.get(type(node))
        if type_check is not None and not type_check(value):
            return value, [
                ValidationIssue(f"{node.type_name}.base", f"Invalid type: expected {node.type_name}", path)
            ]

        issues = self._check_rules(node, value, path, store)

        if isinstance(node, ObjectSchema):
            value, child_issues = self._check_keys(node, value, path, store)
            issues.extend(child_issues)
        elif isinstance(node, ArraySchema):
            value, child_issues = self._check_items(node, value, path, store)
            issues.extend(child_issues)

        return value, issues

    def _check_rules(
        self, node: AnySchema, value: Any, path: JsonPointer, store: Optional[Store]
    ) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        for rule in node.rules:
            if isinstance(node, ArraySchema) and rule.name == "has":
                passed = self._array_has(rule.args["schema"], value, path, store)
            else:
                passed = _RULE_CHECKS[(node.type_name, rule.name)](rule, value)

            if store is not None:
                store.log("rule", rule.name, RuleOutcome.PASS if passed else RuleOutcome.ERROR, node)

            if not passed:
                issues.append(
                    ValidationIssue(
                        f"{node.type_name}.{rule.name}",
                        f"Value fails rule '{rule.name}' {_describe_args(rule)}".rstrip(),
                        path,
                    )
                )
        return issues

    def _array_has(self, schema: AnySchema, value: List[Any], path: JsonPointer, store: Optional[Store]) -> bool:
        for index, item in enumerate(value):
            _, item_issues = self._walk(schema, item, _join_path(path, index), store)
            if not item_issues:
                return True
        return False

    def _check_keys(
        self, node: ObjectSchema, value: Dict[str, Any], path: JsonPointer, store: Optional[Store]
    ) -> Tuple[Dict[str, Any], List[ValidationIssue]]:
        issues: List[ValidationIssue] = []
        result: Dict[str, Any] = {}

        for key, child in node.keys_.items():
            child_value, child_issues = self._walk(child, value.get(key, MISSING), _join_path(path, key), store)
            issues.extend(child_issues)
            if child_value is not MISSING:
                result[key] = child_value

        allow_unknown = not node.keys_ or node.flags.get("unknown")
        for key, item in value.items():
            if key in node.keys_:
                continue
            if allow_unknown:
                result[key] = item
                continue
            issues.append(ValidationIssue("object.unknown", f"Unknown field '{key}'", _join_path(path, key)))

        return result, issues

    def _check_items(
        self, node: ArraySchema, value: List[Any], path: JsonPointer, store: Optional[Store]
    ) -> Tuple[List[Any], List[ValidationIssue]]:
        if not node.items_:
            return list(value), []

        issues: List[ValidationIssue] = []
        result: List[Any] = []
        for index, item in enumerate(value):
            item_path = _join_path(path, index)
            for item_schema in node.items_:
                item_value, item_issues = self._walk(item_schema, item, item_path, store)
                if not item_issues:
                    result.append(item_value)
                    break
            else:
                result.append(item)
                issues.append(
                    ValidationIssue("array.includes", "Item does not match any allowed schema", item_path)
                )
        return result, issues

    def _check_alternatives(
        self, node: AlternativesSchema, value: Any, path: JsonPointer, store: Optional[Store]
    ) -> Tuple[Any, List[ValidationIssue]]:
        if not node.matches:
            return value, []

        for match in node.matches:
            match_value, match_issues = self._walk(match, value, path, store)
            if not match_issues:
                return match_value, []

        return value, [ValidationIssue("alternatives.match", "Value does not match any allowed schema", path)]


def _describe_args(rule: Rule) -> str:
    shown = {
        name: getattr(arg, "pattern", arg)
        for name, arg in rule.args.items()
        if not isinstance(arg, AnySchema)
    }
    if not shown:
        return ""
    return "(" + ", ".join(f"{name}={arg!r}" for name, arg in shown.items()) + ")"
