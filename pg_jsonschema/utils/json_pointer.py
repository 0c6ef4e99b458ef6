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

"""JSON Pointer (RFC 6901) helpers shared by the compiler, engine and loaders."""

from typing import Iterable, List, Union

PathToken = Union[str, int]


def escape_token(token: PathToken) -> str:
    # JSON Pointer escaping: "~" -> "~0", "/" -> "~1"
    return str(token).replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def format_pointer(tokens: Iterable[PathToken]) -> str:
    """Render a sequence of keys/indices as a JSON Pointer ("" is the root)."""
    return "".join(f"/{escape_token(t)}" for t in tokens)


def split_pointer(pointer: str) -> List[str]:
    """Split a JSON Pointer into unescaped reference tokens.

    Raises:
        ValueError: If the pointer is neither empty nor starts with "/".
    """
    if pointer == "":
        return []
    if not pointer.startswith("/"):
        raise ValueError(f"Invalid JSON pointer: '{pointer}'")
    return [unescape_token(token) for token in pointer[1:].split("/")]


def display_pointer(tokens: Iterable[PathToken]) -> str:
    """Pointer text used in human-readable messages."""
    return format_pointer(tokens) or "<root>"
