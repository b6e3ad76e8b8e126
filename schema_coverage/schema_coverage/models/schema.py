from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Pattern, Tuple, Union

from ..coverage.identifier import ChildRef, literal_key


class _Missing:
    """Marker for an absent value (an object key that is not present)."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass(frozen=True)
class Rule:
    name: str
    args: Dict[str, Any] = field(default_factory=dict)


def _literals(values: Tuple[Any, ...]) -> Tuple[Any, ...]:
    for value in values:
        try:
            hash(value)
        except TypeError:
            raise TypeError(f"Literal values must be hashable, got {type(value).__name__}: {value!r}") from None
    return values


def _merge_literals(current: Tuple[Any, ...], added: Tuple[Any, ...]) -> Tuple[Any, ...]:
    merged = list(current)
    seen = {literal_key(value) for value in current}
    for value in added:
        if literal_key(value) not in seen:
            seen.add(literal_key(value))
            merged.append(value)
    return tuple(merged)


def _drop_literals(current: Tuple[Any, ...], removed: Tuple[Any, ...]) -> Tuple[Any, ...]:
    keys = {literal_key(value) for value in removed}
    return tuple(value for value in current if literal_key(value) not in keys)


class AnySchema:
    """Schema node accepting any value.

    Every modifier returns a modified copy; the receiver is left untouched so a
    node can be shared between several containers.
    """

    type_name = "any"

    def __init__(self):
        self.flags: Dict[str, Any] = {}
        self.rules: List[Rule] = []
        self.valids: Tuple[Any, ...] = ()
        self.invalids: Tuple[Any, ...] = ()

    def __repr__(self) -> str:
        label = self.flags.get("id") or self.flags.get("_key")
        return f"<{type(self).__name__} {label}>" if label is not None else f"<{type(self).__name__}>"

    @property
    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def children(self) -> Iterator[ChildRef]:
        for index, rule in enumerate(self.rules):
            for arg_name, arg in rule.args.items():
                if isinstance(arg, AnySchema):
                    yield ChildRef(arg, "rules", rule.name, ("rules", index, "args", arg_name))
        yield from self._terms()

    def _terms(self) -> Iterator[ChildRef]:
        return iter(())

    def _clone(self) -> "AnySchema":
        obj = copy.copy(self)
        obj.flags = dict(self.flags)
        obj.rules = list(self.rules)
        return obj

    def _set_flag(self, name: str, value: Any) -> "AnySchema":
        obj = self._clone()
        obj.flags[name] = value
        return obj

    def _add_rule(self, name: str, **args) -> "AnySchema":
        obj = self._clone()
        obj.rules = [rule for rule in obj.rules if rule.name != name]
        obj.rules.append(Rule(name=name, args=args))
        return obj

    def get_rule(self, name: str) -> Optional[Rule]:
        for rule in self.rules:
            if rule.name == name:
                return rule
        return None

    # Flags

    def required(self) -> "AnySchema":
        return self._set_flag("presence", "required")

    def optional(self) -> "AnySchema":
        return self._set_flag("presence", "optional")

    def default(self, value: Any) -> "AnySchema":
        return self._set_flag("default", value)

    def failover(self, value: Any) -> "AnySchema":
        return self._set_flag("failover", value)

    def id(self, identifier: str) -> "AnySchema":
        return self._set_flag("id", identifier)

    @property
    def is_required(self) -> bool:
        return self.flags.get("presence") == "required"

    # Literals

    def allow(self, *values: Any) -> "AnySchema":
        obj = self._clone()
        obj.valids = _merge_literals(obj.valids, _literals(values))
        obj.invalids = _drop_literals(obj.invalids, values)
        return obj

    def valid(self, *values: Any) -> "AnySchema":
        return self.allow(*values)._set_flag("only", True)

    def invalid(self, *values: Any) -> "AnySchema":
        obj = self._clone()
        obj.invalids = _merge_literals(obj.invalids, _literals(values))
        obj.valids = _drop_literals(obj.valids, values)
        return obj


class StringSchema(AnySchema):
    type_name = "string"

    def min(self, limit: int) -> "StringSchema":
        return self._add_rule("min", limit=limit)

    def max(self, limit: int) -> "StringSchema":
        return self._add_rule("max", limit=limit)

    def pattern(self, regex: Union[str, Pattern]) -> "StringSchema":
        return self._add_rule("pattern", regex=re.compile(regex))


class NumberSchema(AnySchema):
    type_name = "number"

    def min(self, limit: Union[int, float]) -> "NumberSchema":
        return self._add_rule("min", limit=limit)

    def max(self, limit: Union[int, float]) -> "NumberSchema":
        return self._add_rule("max", limit=limit)

    def integer(self) -> "NumberSchema":
        return self._add_rule("integer")


class BooleanSchema(AnySchema):
    type_name = "boolean"


class ObjectSchema(AnySchema):
    type_name = "object"

    def __init__(self):
        super().__init__()
        self.keys_: Dict[str, AnySchema] = {}
        self.flags["unknown"] = False

    def _clone(self) -> "ObjectSchema":
        obj = super()._clone()
        obj.keys_ = dict(self.keys_)
        return obj

    def keys(self, children: Optional[Dict[str, AnySchema]] = None, **more: AnySchema) -> "ObjectSchema":
        obj = self._clone()
        for key, child in {**(children or {}), **more}.items():
            obj.keys_[key] = child._set_flag("_key", key)
        return obj

    def unknown(self, allow: bool = True) -> "ObjectSchema":
        return self._set_flag("unknown", allow)

    def _terms(self) -> Iterator[ChildRef]:
        for index, child in enumerate(self.keys_.values()):
            yield ChildRef(child, "keys", "keys", ("keys", index))


class ArraySchema(AnySchema):
    type_name = "array"

    def __init__(self):
        super().__init__()
        self.items_: List[AnySchema] = []

    def _clone(self) -> "ArraySchema":
        obj = super()._clone()
        obj.items_ = list(self.items_)
        return obj

    def items(self, *schemas: AnySchema) -> "ArraySchema":
        obj = self._clone()
        obj.items_.extend(schemas)
        return obj

    def min(self, limit: int) -> "ArraySchema":
        return self._add_rule("min", limit=limit)

    def max(self, limit: int) -> "ArraySchema":
        return self._add_rule("max", limit=limit)

    def has(self, schema: AnySchema) -> "ArraySchema":
        return self._add_rule("has", schema=schema)

    def _terms(self) -> Iterator[ChildRef]:
        for index, child in enumerate(self.items_):
            yield ChildRef(child, "terms", "items", ("items", index))


class AlternativesSchema(AnySchema):
    type_name = "alternatives"

    def __init__(self):
        super().__init__()
        self.matches: List[AnySchema] = []

    def _clone(self) -> "AlternativesSchema":
        obj = super()._clone()
        obj.matches = list(self.matches)
        return obj

    def try_(self, *schemas: AnySchema) -> "AlternativesSchema":
        obj = self._clone()
        obj.matches.extend(schemas)
        return obj

    def _terms(self) -> Iterator[ChildRef]:
        for index, child in enumerate(self.matches):
            yield ChildRef(child, "terms", "matches", ("matches", index))


def any_() -> AnySchema:
    return AnySchema()


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def object_(children: Optional[Dict[str, AnySchema]] = None, **more: AnySchema) -> ObjectSchema:
    schema = ObjectSchema()
    if children or more:
        schema = schema.keys(children, **more)
    return schema


def array(*items: AnySchema) -> ArraySchema:
    return ArraySchema().items(*items) if items else ArraySchema()


def alternatives(*schemas: AnySchema) -> AlternativesSchema:
    return AlternativesSchema().try_(*schemas)
