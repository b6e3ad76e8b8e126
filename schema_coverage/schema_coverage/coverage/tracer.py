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

"""Registry of traced schema roots.

A :class:`Tracer` is the context object that ties each schema root to its
coverage :class:`~.store.Store` and to the place in the test sources where the
root was first validated. Create one per coverage run, feed it to the validator
and ask it for a :meth:`Tracer.report` at the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from ..file_io.source_location import SourceLocation, capture_location
from .report import CoverageRecord, generate_report
from .store import Store

logger = logging.getLogger(__name__)


@dataclass
class Registration:
    root: Any
    store: Store
    file_path: Optional[Path] = None
    line: Optional[int] = None


class Tracer:
    """Coverage registry keyed by schema root identity."""

    def __init__(self, name: str = "schema_coverage", strict_ids: Optional[bool] = None):
        self.name = name
        self.strict_ids = strict_ids
        self._schemas: Dict[int, Registration] = {}

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[Registration]:
        return iter(self._schemas.values())

    def register(self, root: Any, location: Optional[SourceLocation] = None) -> Store:
        """Return the store for ``root``, scanning it on first registration.

        Args:
            root: Schema root node
            location: Where the root is exercised from; defaults to the caller
                of ``register``

        Returns:
            The coverage store shared by every run against ``root``
        """
        existing = self._schemas.get(id(root))
        if existing is not None:
            return existing.store

        if location is None:
            location = capture_location(depth=1)

        store = Store(root, strict_ids=self.strict_ids)
        self._schemas[id(root)] = Registration(
            root=root,
            store=store,
            file_path=location.file_path,
            line=location.line,
        )
        logger.debug(f"Registered schema {type(root).__name__} from {location.file_path}:{location.line}")
        return store

    def store_for(self, root: Any) -> Optional[Store]:
        registration = self._schemas.get(id(root))
        return registration.store if registration is not None else None

    def report(self, file_path: Union[str, Path, None] = None) -> Optional[List[CoverageRecord]]:
        """Report coverage gaps for all registered roots, or None on full coverage."""
        return generate_report(self._schemas.values(), file_path=file_path)

    def reset(self) -> None:
        """Forget every registered root."""
        self._schemas.clear()


_active_tracer: Optional[Tracer] = None


def trace() -> Tracer:
    """Return the process tracer, creating it on first use."""
    global _active_tracer
    if _active_tracer is None:
        _active_tracer = Tracer()
    return _active_tracer


def untrace() -> None:
    """Drop the process tracer; later validations run untraced."""
    global _active_tracer
    _active_tracer = None


def get_active_tracer() -> Optional[Tracer]:
    return _active_tracer
