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

"""Coverage tracking for declarative validation schemas."""

from .identifier import ChildRef, PathSegment, SchemaPath, format_path, literal_key, resolve_id
from .store import CoverageLog, RuleOutcome, Store
from .report import CoverageRecord, MissingItem, generate_report, report_store
from .tracer import Registration, Tracer, get_active_tracer, trace, untrace

__all__ = [
    "ChildRef",
    "PathSegment",
    "SchemaPath",
    "format_path",
    "literal_key",
    "resolve_id",
    "CoverageLog",
    "RuleOutcome",
    "Store",
    "CoverageRecord",
    "MissingItem",
    "generate_report",
    "report_store",
    "Registration",
    "Tracer",
    "get_active_tracer",
    "trace",
    "untrace",
]
