import logging

import pytest

from schema_coverage.coverage.tracer import Tracer, untrace
from schema_coverage.validation.validator import Validator


@pytest.fixture(autouse=True)
def no_active_tracer():
    untrace()
    yield
    untrace()


@pytest.fixture(autouse=True)
def restore_root_logging():
    # The CLI reconfigures the root logger with the streams of the running test
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def tracer():
    return Tracer()


@pytest.fixture
def validator(tracer):
    return Validator(tracer=tracer)
