#!/usr/bin/env python3
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

"""CLI entry point for measuring schema coverage from YAML test cases."""

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import coverage_config
from ..exceptions import SchemaCoverageError
from ..file_io.source_location import SourceLocation
from ..file_io.template_renderer import TemplateRenderer, custom_serializer
from ..models.parsing.yaml_parser import yaml_parser
from ..models.schema import MISSING
from ..models.schema_loader import load_schema_definition
from ..validation.validator import Validator
from .report import CoverageRecord
from .tracer import Tracer

logger = logging.getLogger(__name__)

EXPECTATIONS = ("valid", "invalid")


@dataclass
class CaseFailure:
    case_file: Path
    index: int
    expected: str
    actual: str
    name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "file": str(self.case_file),
            "index": self.index,
            "name": self.name,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass
class CoverageRun:
    """Outcome of validating every case against one schema."""

    records: Optional[List[CoverageRecord]]
    case_count: int = 0
    failures: List[CaseFailure] = field(default_factory=list)

    @property
    def gap_count(self) -> int:
        return sum(len(record.missing) for record in self.records or [])

    @property
    def ok(self) -> bool:
        return not self.records and not self.failures


def load_cases(case_path: Path) -> List[dict]:
    """Load validation cases from a YAML file.

    The file holds a mapping with a ``cases`` list. Each case is a mapping with
    an optional ``name``, an optional ``value`` (absent means no value at all)
    and an optional ``expect`` of ``valid`` or ``invalid``.
    """
    document = yaml_parser.load(case_path)
    if not isinstance(document, dict) or not isinstance(document.get("cases"), list):
        raise SchemaCoverageError(f"Case file must contain a 'cases' list: {case_path}")

    cases = []
    for index, case in enumerate(document["cases"]):
        if not isinstance(case, dict):
            raise SchemaCoverageError(f"Case #{index} in {case_path} must be a mapping")
        expect = case.get("expect")
        if expect is not None and expect not in EXPECTATIONS:
            raise SchemaCoverageError(
                f"Case #{index} in {case_path} has invalid 'expect': {expect!r}. Valid values: {EXPECTATIONS}"
            )
        cases.append(case)
    return cases


def run_coverage(schema_path: Path, case_paths: List[Path], tracer: Optional[Tracer] = None) -> CoverageRun:
    """Validate every case against the schema and report coverage gaps."""
    tracer = tracer if tracer is not None else Tracer()
    schema = load_schema_definition(schema_path)
    tracer.register(schema, location=SourceLocation(file_path=schema_path, line=1))

    validator = Validator(tracer=tracer)
    run = CoverageRun(records=None)

    for case_path in case_paths:
        for index, case in enumerate(load_cases(case_path)):
            result = validator.validate(schema, case.get("value", MISSING))
            run.case_count += 1

            actual = "valid" if result.ok else "invalid"
            expected = case.get("expect")
            if expected is not None and expected != actual:
                run.failures.append(
                    CaseFailure(case_file=case_path, index=index, expected=expected, actual=actual, name=case.get("name"))
                )
                for issue in result.issues:
                    logger.info(f"{case_path}#{index}: {issue.path or '/'}: {issue.message}")

    run.records = tracer.report()
    logger.debug(f"Validated {run.case_count} case(s) against {schema_path}")
    return run


def format_run(run: CoverageRun, output_format: str) -> str:
    if output_format == "json":
        output = {
            "cases": run.case_count,
            "gaps": run.gap_count,
            "failures": [failure.to_dict() for failure in run.failures],
            "results": [record.to_dict() for record in run.records or []],
        }
        return json.dumps(output, indent=2, default=custom_serializer)

    if output_format == "github-actions":
        lines = []
        for failure in run.failures:
            lines.append(
                f"::error file={failure.case_file}::Case #{failure.index} expected {failure.expected}, got {failure.actual}"
            )
        for record in run.records or []:
            lines.append(f"::{record.severity} file={record.file_path},line={record.line or 1}::{record.message}")
        return "\n".join(lines)

    renderer = TemplateRenderer()
    return renderer.render_template(
        "coverage_report.txt.jinja2",
        records=run.records or [],
        failures=run.failures,
        case_count=run.case_count,
        gap_count=run.gap_count,
    )


def main(argv: List[str] | None = None) -> None:
    """Main entry point for the coverage CLI."""
    parser = argparse.ArgumentParser(
        description='Report schema branches, rules and literals not exercised by test cases',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('schema', help='YAML schema definition file')
    parser.add_argument('cases', nargs='+', help='YAML case files to validate against the schema')
    parser.add_argument(
        '--format',
        choices=['human', 'json', 'github-actions'],
        default='human',
        help='Output format (default: human)',
    )
    parser.add_argument('--output', default=None, help='Write the report to this file instead of stdout')

    args = parser.parse_args(argv)
    coverage_config.set_logging()

    schema_path = Path(args.schema)
    case_paths = [Path(p) for p in args.cases]

    try:
        run = run_coverage(schema_path, case_paths)
    except SchemaCoverageError as e:
        logger.error(str(e))
        sys.exit(1)

    content = format_run(run, args.format)
    if args.output:
        Path(args.output).write_text(content + ("\n" if not content.endswith("\n") else ""), encoding="utf-8")
    else:
        print(content.rstrip("\n"))

    sys.exit(0 if run.ok else 1)


if __name__ == '__main__':
    main()
