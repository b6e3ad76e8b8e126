from schema_coverage.coverage.report import MissingItem, report_store
from schema_coverage.coverage.store import Store
from schema_coverage.models.schema import alternatives, any_, array, number, object_, string


def _dicts(items):
    return [item.to_dict() for item in items]


def test_unvalidated_schema_reports_top_level_nodes_only(tracer):
    root = object_(a=string().required(), b=object_(c=number().min(1)))
    tracer.register(root)

    records = tracer.report()

    assert len(records) == 1
    assert _dicts(records[0].missing) == [
        {"status": "never reached", "paths": []},
        {"status": "never reached", "paths": [["a"]]},
        {"status": "never reached", "paths": [["b"]]},
    ]


def test_absent_optional_value_leaves_rules_unused(tracer, validator):
    root = object_(a=string().required(), b=number().min(0).max(10))

    assert validator.validate(root, {"a": "x"}).ok

    records = tracer.report()
    assert _dicts(records[0].missing) == [
        {"rule": "min", "status": "never used", "paths": [["b"]]},
        {"rule": "max", "status": "never used", "paths": [["b"]]},
    ]


def test_single_outcome_labels(tracer, validator):
    root = object_(a=string().required(), b=number().min(0).max(10))

    assert not validator.validate(root, {"a": "x", "b": 11}).ok

    records = tracer.report()
    assert _dicts(records[0].missing) == [
        {"rule": "min", "status": "always pass", "paths": [["b"]]},
        {"rule": "max", "status": "always error", "paths": [["b"]]},
    ]


def test_both_outcomes_close_the_gap(tracer, validator):
    root = object_(a=string().required(), b=number().min(0).max(10))

    validator.validate(root, {"a": "x", "b": 11})
    validator.validate(root, {"a": "x", "b": -1})

    assert tracer.report() is None


def test_missing_invalids(tracer, validator):
    root = object_(name=string().invalid(None, ""))

    result = validator.validate(root, {"name": None})

    assert [issue.code for issue in result.issues] == ["any.invalid"]
    records = tracer.report()
    assert _dicts(records[0].missing) == [{"rule": "invalids", "status": [""]}]
    assert records[0].message == "Schema missing tests for invalids ('')"


def test_missing_valids_ignore_order_and_duplicates(tracer, validator):
    root = string().valid("a", "b", "c")

    for value in ("b", "b", "a", "b"):
        validator.validate(root, value)

    missing = tracer.report()[0].missing
    assert _dicts(missing) == [{"rule": "valids", "status": ["c"]}]


def test_unreached_subtree_is_reported_once(tracer, validator):
    root = object_(top=object_(nested=object_(leaf=string().min(1))))

    validator.validate(root, "not an object")

    records = tracer.report()
    assert _dicts(records[0].missing) == [{"status": "never reached", "paths": [["top"]]}]
    assert records[0].message == "Schema missing tests for top (never reached)"


def test_shared_node_gap_lists_every_path(tracer, validator):
    shared = number().min(0)
    root = object_(x=array(shared), y=array(shared))

    validator.validate(root, {"x": [1]})

    records = tracer.report()
    assert _dicts(records[0].missing) == [{"rule": "min", "status": "always pass", "paths": [["x", ["@items", 0]], ["y", ["@items", 0]]]}]


def test_default_and_failover_pseudo_rules(tracer, validator):
    root = object_(
        retries=number().default(3),
        port=number().max(3).failover(0),
    )

    result = validator.validate(root, {"retries": 1, "port": 5})

    assert result.ok
    assert result.value == {"retries": 1, "port": 0}
    assert _dicts(tracer.report()[0].missing) == [
        {"rule": "default", "status": "never used", "paths": [["retries"]]},
        {"rule": "max", "status": "always error", "paths": [["port"]]},
    ]

    assert validator.validate(root, {"port": 2}).value == {"retries": 3, "port": 2}
    assert tracer.report() is None


def test_rule_on_root_has_no_paths(tracer, validator):
    root = array().has(string())

    validator.validate(root, [1])

    records = tracer.report()
    assert _dicts(records[0].missing) == [{"rule": "has", "status": "always error"}]
    assert records[0].message == "Schema missing tests for has (always error)"


def test_report_is_idempotent(tracer, validator):
    root = object_(a=string().min(2), b=object_(c=number()))
    validator.validate(root, {"a": "x"})

    first = [record.to_dict() for record in tracer.report()]
    second = [record.to_dict() for record in tracer.report()]

    assert first == second


def test_record_shape(tracer, validator):
    root = object_(a=string().min(2))
    validator.validate(root, {"a": "x"})

    record = tracer.report()[0].to_dict()

    assert record["severity"] == "error"
    assert record["filename"] == __file__ or record["filename"].endswith("test_report.py")
    assert isinstance(record["line"], int)
    assert record["message"] == "Schema missing tests for a:min (always error)"


def test_report_store_on_fresh_store():
    root = number().min(1)
    assert report_store(Store(root)) == [MissingItem(status="never reached", paths=[])]


def test_missing_item_message():
    item = MissingItem(status="always pass", rule="max", paths=[("servers", ("@items", 1), "port")])
    assert item.message == "servers.port:max (always pass)"
    assert MissingItem(status=[1, None], rule="valids").message == "valids (1, None)"
    assert MissingItem(status="never reached", paths=[]).message == "<root> (never reached)"


def test_shared_node_under_unreached_ancestor_is_suppressed(tracer, validator):
    shared = number().min(0)
    root = object_(z=object_(y=array(shared)), x=array(shared))

    validator.validate(root, {"x": [1]})

    records = tracer.report()
    assert _dicts(records[0].missing) == [{"status": "never reached", "paths": [["z", "y"]]}]


def test_untried_alternative_is_never_reached(tracer, validator):
    root = object_(port=alternatives(number(), string()))

    validator.validate(root, {"port": 80})

    records = tracer.report()
    assert _dicts(records[0].missing) == [{"status": "never reached", "paths": [["port", ["@matches", 1]]]}]
    assert records[0].message == "Schema missing tests for port (never reached)"


def test_observed_integer_does_not_cover_boolean_literal():
    node = any_().valid(1, True)
    store = Store(node)
    store.entry(node)
    store.value("valid", 1, node)

    missing = report_store(store)

    assert len(missing) == 1
    assert missing[0].rule == "valids"
    assert missing[0].status == [True]
    assert missing[0].status[0] is True


def test_unnamed_alternative_under_root_is_labelled_root(tracer, validator):
    root = alternatives(number(), string())

    validator.validate(root, 80)

    records = tracer.report()
    assert _dicts(records[0].missing) == [{"status": "never reached", "paths": [[["@matches", 1]]]}]
    assert records[0].message == "Schema missing tests for <root> (never reached)"
