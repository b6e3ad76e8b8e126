import pytest

from schema_coverage.coverage.identifier import literal_key
from schema_coverage.coverage.store import RuleOutcome, Store
from schema_coverage.exceptions import IdentifierCollisionError, UnknownSchemaNodeError
from schema_coverage.models.schema import alternatives, any_, array, number, object_, string


def test_scan_creates_one_log_per_node_in_preorder():
    root = object_(a=string().required(), b=number().min(0).max(10))
    store = Store(root)

    nodes = [node for node, _ in store.items()]
    assert nodes == [root, root.keys_["a"], root.keys_["b"]]
    assert [log.paths for _, log in store.items()] == [[], [("a",)], [("b",)]]


def test_shared_node_has_one_log_with_every_path():
    shared = number().min(0)
    root = object_(x=array(shared), y=alternatives(shared, string()))
    store = Store(root)

    assert len(store) == 5
    log = store.get(shared)
    assert log.paths == [("x", ("@items", 0)), ("y", ("@matches", 0))]


def test_same_node_twice_in_one_term_list():
    shared = string()
    root = alternatives(shared, shared)
    store = Store(root)

    assert len(store) == 2
    assert store.get(shared).paths == [(("@matches", 0),), (("@matches", 1),)]


def test_paths_are_recorded_once():
    shared = string()
    root = array(shared)
    store = Store(root)

    store._scan(root, ())
    assert store.get(shared).paths == [(("@items", 0),)]


def test_identifier_collision_is_recorded(caplog):
    first = string().id("dup")
    second = number().id("dup")
    store = Store(alternatives(first, second), strict_ids=False)

    assert len(store.collisions) == 1
    collision = store.collisions[0]
    assert collision.path == ("dup",)
    assert collision.first is first
    assert collision.second is second
    assert "both resolve to path dup" in caplog.text


def test_identifier_collision_raises_in_strict_mode():
    with pytest.raises(IdentifierCollisionError, match="dup"):
        Store(alternatives(string().id("dup"), number().id("dup")), strict_ids=True)


def test_entry_marks_node_reached():
    root = object_(a=string())
    store = Store(root)

    store.entry(root.keys_["a"])

    assert store.get(root.keys_["a"]).entry is True
    assert store.get(root).entry is False


def test_rule_outcomes_accumulate():
    node = number().min(0)
    store = Store(node)

    store.log("rule", "min", "error", node)
    assert store.get(node).rule["min"] == RuleOutcome.ERROR

    store.log("rule", "min", RuleOutcome.ERROR, node)
    assert store.get(node).rule["min"] == RuleOutcome.ERROR

    store.log("rule", "min", "pass", node)
    assert store.get(node).rule["min"] == RuleOutcome.FULL


def test_values_are_recorded_by_source():
    node = string().valid("a", "b").invalid("")
    store = Store(node)

    store.value("valid", "a", node)
    store.value("valid", "a", node)
    store.value("invalid", "", node)

    log = store.get(node)
    assert log.valid == {literal_key("a")}
    assert log.invalid == {literal_key("")}


def test_unknown_node_fails_loudly():
    store = Store(object_(a=string()))
    stranger = any_()

    assert stranger not in store
    with pytest.raises(UnknownSchemaNodeError):
        store.entry(stranger)
    with pytest.raises(UnknownSchemaNodeError):
        store.log("rule", "min", "pass", stranger)
    with pytest.raises(UnknownSchemaNodeError):
        store.value("valid", 1, stranger)


def test_bad_sources_and_outcomes_are_rejected():
    node = number()
    store = Store(node)

    with pytest.raises(ValueError):
        store.log("rule", "min", "sometimes", node)
    with pytest.raises(ValueError):
        store.log("valid", "min", "pass", node)
    with pytest.raises(ValueError):
        store.value("rule", 1, node)


def test_rule_outcome_parse():
    assert RuleOutcome.parse("full") is RuleOutcome.FULL
    assert RuleOutcome.parse(RuleOutcome.PASS) is RuleOutcome.PASS
    assert RuleOutcome.ERROR | RuleOutcome.PASS == RuleOutcome.FULL
