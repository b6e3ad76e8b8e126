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

"""Custom exceptions for the schema coverage tracker."""


class SchemaCoverageError(Exception):
    """Base exception for schema coverage related errors."""
    pass


class UnknownSchemaNodeError(SchemaCoverageError):
    """Exception raised when instrumentation targets a node the scan never discovered."""
    pass


class IdentifierCollisionError(SchemaCoverageError):
    """Exception raised when two distinct schema nodes resolve to the same path."""
    pass


class SchemaDefinitionError(SchemaCoverageError):
    """Exception raised for invalid schema definition documents."""
    pass


class ValidationError(SchemaCoverageError):
    """Exception raised when a value fails validation against a schema."""

    def __init__(self, message: str, issues=None):
        super().__init__(message)
        self.issues = list(issues or [])
