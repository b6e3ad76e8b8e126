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

"""Configuration management for the schema coverage tracker."""

import os
import sys
import logging
from dataclasses import dataclass
from typing import Optional


class _BelowLevelFilter(logging.Filter):
    """Pass only records strictly below a threshold level."""

    def __init__(self, threshold: int) -> None:
        super().__init__()
        self._threshold = threshold

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self._threshold


def configure_split_stream_logging(
    *,
    level: int = logging.INFO,
    stderr_level: int = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
) -> None:
    """Route records below ``stderr_level`` to stdout and the rest to stderr.

    Coverage reports are printed on stdout, so warnings raised while scanning
    (identifier collisions, unreadable case files) stay visible even when a
    caller redirects the report to a file.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)

    if formatter is None:
        formatter = logging.Formatter("%(name)s - %(levelname)s - %(message)s")

    stderr_level = max(stderr_level, logging.DEBUG)

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_BelowLevelFilter(stderr_level))
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(stderr_level)
    stderr_handler.setFormatter(formatter)

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)


@dataclass
class CoverageConfig:
    """Configuration class for schema coverage tracking."""
    log_level: str = "INFO"
    print_level: str = "WARNING"

    # Raise instead of warn when two nodes resolve to the same path
    strict_ids: bool = False

    # Frames between Validator.validate() and the code that called it
    location_depth: int = 1

    @classmethod
    def from_env(cls) -> 'CoverageConfig':
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv('SCHEMA_COVERAGE_LOG_LEVEL', 'INFO'),
            print_level=os.getenv('SCHEMA_COVERAGE_PRINT_LEVEL', 'WARNING'),
            strict_ids=os.getenv('SCHEMA_COVERAGE_STRICT_IDS', 'false').lower() == 'true',
            location_depth=int(os.getenv('SCHEMA_COVERAGE_LOCATION_DEPTH', '1')),
        )

    def set_logging(self) -> logging.Logger:
        """Setup logging based on configuration."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        stderr_level = getattr(logging, self.print_level.upper(), logging.WARNING)

        formatter = logging.Formatter('%(name)s - %(levelname)s - %(message)s')
        configure_split_stream_logging(level=level, stderr_level=stderr_level, formatter=formatter)

        return logging.getLogger('schema_coverage')


# Global configuration instance
coverage_config = CoverageConfig.from_env()
