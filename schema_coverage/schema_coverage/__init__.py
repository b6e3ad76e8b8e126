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

"""Coverage analysis for declarative validation schemas."""

__version__ = "0.1.0"

from .coverage import CoverageRecord, MissingItem, RuleOutcome, Store, Tracer, get_active_tracer, trace, untrace
from .exceptions import (
    IdentifierCollisionError,
    SchemaCoverageError,
    SchemaDefinitionError,
    UnknownSchemaNodeError,
    ValidationError,
)
from .validation import ValidationIssue, ValidationResult, Validator

__all__ = [
    "CoverageRecord",
    "MissingItem",
    "RuleOutcome",
    "Store",
    "Tracer",
    "get_active_tracer",
    "trace",
    "untrace",
    "IdentifierCollisionError",
    "SchemaCoverageError",
    "SchemaDefinitionError",
    "UnknownSchemaNodeError",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
    "Validator",
]
