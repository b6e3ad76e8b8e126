import inspect
from pathlib import Path

from schema_coverage.coverage.tracer import Tracer, get_active_tracer, trace, untrace
from schema_coverage.file_io.source_location import SourceLocation
from schema_coverage.models.schema import number, object_, string
from schema_coverage.validation.validator import Validator


def _current_line() -> int:
    return inspect.currentframe().f_back.f_lineno


def test_register_is_idempotent(tracer):
    root = object_(a=string())

    store = tracer.register(root)

    assert tracer.register(root) is store
    assert len(tracer) == 1
    assert tracer.store_for(root) is store
    assert tracer.store_for(string()) is None


def test_register_captures_caller_location(tracer):
    root = number()

    line = _current_line() + 1
    tracer.register(root)

    registration = next(iter(tracer))
    assert Path(registration.file_path).resolve() == Path(__file__).resolve()
    assert registration.line == line


def test_explicit_location(tracer):
    root = number()
    tracer.register(root, location=SourceLocation(file_path=Path("schemas/port.yaml"), line=7))

    registration = next(iter(tracer))
    assert registration.file_path == Path("schemas/port.yaml")
    assert registration.line == 7


def test_validator_registers_its_caller(tracer, validator):
    root = object_(a=string().min(3))

    line = _current_line() + 1
    validator.validate(root, {"a": "x"})

    record = tracer.report()[0]
    assert Path(record.file_path).resolve() == Path(__file__).resolve()
    assert record.line == line


def test_report_filters_by_file(tracer, validator):
    validator.validate(number().min(1), 0)

    assert tracer.report(file_path=__file__) is not None
    assert tracer.report(file_path="elsewhere.py") is None


def test_each_root_gets_its_own_record(tracer, validator):
    first = number().min(1)
    second = string().max(1)

    validator.validate(first, 0)
    validator.validate(second, "ab")

    records = tracer.report()
    assert [record.message for record in records] == [
        "Schema missing tests for min (always error)",
        "Schema missing tests for max (always error)",
    ]


def test_reset_clears_registry(tracer, validator):
    validator.validate(number().min(1), 0)

    tracer.reset()

    assert len(tracer) == 0
    assert tracer.report() is None


def test_trace_and_untrace():
    assert get_active_tracer() is None

    active = trace()
    assert trace() is active
    assert get_active_tracer() is active

    root = string().min(2)
    Validator().validate(root, "abc")
    assert active.store_for(root) is not None

    untrace()
    assert get_active_tracer() is None


def test_untraced_validation_records_nothing():
    root = string().min(2)

    result = Validator().validate(root, "a")

    assert not result.ok
    assert get_active_tracer() is None


def test_explicit_tracer_takes_precedence_over_active():
    active = trace()
    explicit = Tracer()
    root = number()

    Validator(tracer=explicit).validate(root, 1)

    assert explicit.store_for(root) is not None
    assert active.store_for(root) is None
