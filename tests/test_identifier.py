from schema_coverage.coverage.identifier import ChildRef, format_path, resolve_child_id, resolve_id
from schema_coverage.models.schema import alternatives, any_, array, number, object_, string


def test_explicit_id_wins_over_key():
    root = object_(port=number().id("listen_port"))
    child = root.keys_["port"]

    assert child.flags["_key"] == "port"
    assert resolve_id(child, "keys", "keys", ("keys", 0)) == "listen_port"


def test_object_key_is_used_verbatim():
    root = object_(host=string())
    assert resolve_id(root.keys_["host"], "keys", "keys", ("keys", 0)) == "host"


def test_synthesized_name_for_rule_arguments():
    assert resolve_id(any_(), "rules", "has", ("rules", 0, "args", "schema")) == "@has"


def test_terms_keep_position():
    first = resolve_id(string(), "terms", "matches", ("matches", 0))
    second = resolve_id(string(), "terms", "matches", ("matches", 1))

    assert first == ("@matches", 0)
    assert second == ("@matches", 1)
    assert first != second


def test_children_enumerate_terms_and_rule_arguments():
    item = number()
    needle = string()
    root = array(item).has(needle)

    refs = list(root.children())

    assert ChildRef(needle, "rules", "has", ("rules", 0, "args", "schema")) in refs
    assert ChildRef(item, "terms", "items", ("items", 0)) in refs
    assert [resolve_child_id(ref) for ref in refs] == ["@has", ("@items", 0)]


def test_alternatives_enumerate_matches_in_order():
    root = alternatives(string(), number())
    assert [resolve_child_id(ref) for ref in root.children()] == [("@matches", 0), ("@matches", 1)]


def test_format_path():
    assert format_path(("server", ("@items", 0), "port")) == "server.port"
    assert format_path(("servers", 3, "port")) == "servers[3].port"
    assert format_path(()) == "<root>"
    assert format_path((("@matches", 1),)) == "<root>"
