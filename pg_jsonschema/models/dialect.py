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

"""JSON Schema dialect (draft) detection.

Every schema resource may declare its dialect in ``$schema``; resources
without one use the configured default.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from ..exceptions import ConfigurationError, InvalidSchemaShape, UnsupportedDraftFeature


class Dialect(Enum):
    """Supported JSON Schema drafts, oldest first."""

    DRAFT4 = "draft-04"
    DRAFT6 = "draft-06"
    DRAFT7 = "draft-07"
    DRAFT2019_09 = "2019-09"
    DRAFT2020_12 = "2020-12"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    def at_least(self, other: "Dialect") -> bool:
        return self.rank >= other.rank

    def at_most(self, other: "Dialect") -> bool:
        return self.rank <= other.rank

    @property
    def id_keyword(self) -> str:
        return "id" if self is Dialect.DRAFT4 else "$id"

    @property
    def ref_overrides_siblings(self) -> bool:
        return self.at_most(Dialect.DRAFT7)

    @property
    def meta_schema_uri(self) -> str:
        return _META_SCHEMA_URIS[self]


_ORDER = (
    Dialect.DRAFT4,
    Dialect.DRAFT6,
    Dialect.DRAFT7,
    Dialect.DRAFT2019_09,
    Dialect.DRAFT2020_12,
)

_META_SCHEMA_URIS = {
    Dialect.DRAFT4: "http://json-schema.org/draft-04/schema#",
    Dialect.DRAFT6: "http://json-schema.org/draft-06/schema#",
    Dialect.DRAFT7: "http://json-schema.org/draft-07/schema#",
    Dialect.DRAFT2019_09: "https://json-schema.org/draft/2019-09/schema",
    Dialect.DRAFT2020_12: "https://json-schema.org/draft/2020-12/schema",
}

_URI_LOOKUP = {
    uri.rstrip("#").split("://", 1)[1]: dialect for dialect, uri in _META_SCHEMA_URIS.items()
}

_NAME_RE = re.compile(r"^(?:draft[-_ ]?)?0?(\d+)(?:[-_](\d+))?$", re.IGNORECASE)


def dialect_from_uri(uri: str) -> Optional[Dialect]:
    """Map a ``$schema`` URI to a dialect (scheme and trailing '#' ignored)."""
    text = uri.strip().rstrip("#")
    if "://" in text:
        text = text.split("://", 1)[1]
    return _URI_LOOKUP.get(text)


def parse_dialect(raw: Any) -> Dialect:
    """Parse a dialect name such as ``2020-12``, ``draft7`` or ``draft-04``.

    Meta-schema URIs are accepted too.

    Raises:
        ConfigurationError: If the value does not name a supported dialect.
    """
    if isinstance(raw, Dialect):
        return raw
    if not isinstance(raw, str):
        raise ConfigurationError(f"Dialect must be a string, got {type(raw).__name__}: {raw!r}")

    by_uri = dialect_from_uri(raw)
    if by_uri is not None:
        return by_uri

    m = _NAME_RE.match(raw.strip())
    if m is not None:
        major, minor = m.group(1), m.group(2)
        if minor is not None:
            name = f"{major}-{minor.zfill(2)}"
        else:
            name = f"draft-{major.zfill(2)}"
        for dialect in _ORDER:
            if dialect.value == name:
                return dialect

    raise ConfigurationError(
        f"Unknown JSON Schema dialect: '{raw}'. "
        f"Supported: {', '.join(d.value for d in _ORDER)}."
    )


def detect_dialect(schema: Any, default: Dialect) -> Dialect:
    """Return the dialect declared by a resource root, or *default*.

    Raises:
        InvalidSchemaShape: If ``$schema`` is not a string.
        UnsupportedDraftFeature: If ``$schema`` names an unknown dialect.
    """
    if not isinstance(schema, Mapping) or "$schema" not in schema:
        return default

    uri = schema["$schema"]
    if not isinstance(uri, str):
        raise InvalidSchemaShape("$schema", f"expected a URI string, got {type(uri).__name__}")

    dialect = dialect_from_uri(uri)
    if dialect is None:
        raise UnsupportedDraftFeature("$schema", f"unknown dialect '{uri}'")
    return dialect
