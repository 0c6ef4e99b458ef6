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

"""Schema locations and URI resolution used while compiling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple
from urllib.parse import unquote, urldefrag, urljoin, urlsplit

from ..models.dialect import Dialect
from ..models.schema_node import ReferenceKey
from ..utils.json_pointer import PathToken, escape_token


def normalize_uri(uri: str) -> str:
    """Drop the fragment (including an empty one) from a URI."""
    return urldefrag(uri).url


def resolve_uri(base: str, reference: str) -> str:
    if reference.startswith("#"):
        return f"{normalize_uri(base)}{reference}"
    if not base or urlsplit(reference).scheme:
        return reference
    return urljoin(base, reference)


def split_reference(base: str, reference: str) -> ReferenceKey:
    """Resolve a ``$ref`` value into a (resource URI, fragment) table key."""
    uri, fragment = urldefrag(resolve_uri(base, reference))
    return uri, unquote(fragment)


@dataclass(frozen=True)
class Location:
    """Where a subschema sits: its base URI, dialect and the pointers to it.

    ``scopes`` lists one (resource URI, JSON pointer) pair per enclosing
    resource, outermost first, so a node can be registered under every
    identifier that reaches it.
    """

    base_uri: str
    dialect: Dialect
    scopes: Tuple[ReferenceKey, ...]
    depth: int = 0

    @classmethod
    def for_resource(cls, uri: str, dialect: Dialect) -> "Location":
        return cls(base_uri=uri, dialect=dialect, scopes=((uri, ""),))

    @property
    def pointer(self) -> str:
        return self.scopes[-1][1]

    @property
    def uri(self) -> str:
        return f"{self.base_uri}#{self.pointer}"

    def child(self, *tokens: PathToken) -> "Location":
        suffix = "".join(f"/{escape_token(token)}" for token in tokens)
        return Location(
            base_uri=self.base_uri,
            dialect=self.dialect,
            scopes=tuple((resource, pointer + suffix) for resource, pointer in self.scopes),
            depth=self.depth + 1,
        )

    def enter_resource(self, uri: str, dialect: Dialect) -> "Location":
        scopes = self.scopes
        if scopes[-1] != (uri, ""):
            scopes = scopes + ((uri, ""),)
        return Location(base_uri=uri, dialect=dialect, scopes=scopes, depth=self.depth)
