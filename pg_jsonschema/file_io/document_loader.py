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

"""JSON/YAML document loader with source maps and caching."""

import datetime
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..config import engine_config
from ..exceptions import DocumentError
from ..models.document import JsonValue, dump_json, parse_json
from ..utils.json_pointer import escape_token
from .source_location import SourceLocation, SourceMap, source_for_document

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


@dataclass(frozen=True)
class LoadedDocument:
    """A parsed document plus where each of its values came from."""

    data: JsonValue
    source_map: SourceMap = field(default_factory=dict, compare=False)
    file_path: Optional[Path] = None

    def locate(self, pointer: str) -> SourceLocation:
        return source_for_document(self.file_path, self.source_map, pointer)


def _normalize_yaml(value: Any, pointer: str = "") -> JsonValue:
    """Convert a PyYAML tree into a JSON document.

    YAML scalars without a JSON counterpart become strings (timestamps) or
    are rejected (NaN, infinities, binary).
    """
    if isinstance(value, Mapping):
        normalized = {}
        for key, item in value.items():
            if not isinstance(key, str):
                if isinstance(key, (Mapping, list)):
                    raise DocumentError(f"Unsupported non-scalar object key at '{pointer or '/'}'")
                key = _normalize_yaml(key, pointer)
                key = key if isinstance(key, str) else dump_json(key)
            normalized[key] = _normalize_yaml(item, f"{pointer}/{escape_token(key)}")
        return normalized
    if isinstance(value, list):
        return [_normalize_yaml(item, f"{pointer}/{index}") for index, item in enumerate(value)]
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, float) and not math.isfinite(value):
        raise DocumentError(f"Non-finite number {value} at '{pointer or '/'}' is not a JSON value")
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    raise DocumentError(f"Unsupported YAML value of type {type(value).__name__} at '{pointer or '/'}'")


class DocumentLoader:
    """Loads schema and instance documents from JSON or YAML files."""

    def __init__(self, cache_enabled: Optional[bool] = None):
        """Initialize the loader.

        Args:
            cache_enabled: Whether to cache loaded files. If None, uses global config.
        """
        self.cache_enabled = cache_enabled if cache_enabled is not None else engine_config.cache_enabled
        self._cache: Dict[Path, LoadedDocument] = {}

    @staticmethod
    def build_source_map(content: str) -> SourceMap:
        """Build a mapping from JSON pointers to 1-based line/column.

        This uses PyYAML's node tree (yaml.compose); JSON text is valid YAML
        for this purpose, so the same map serves both formats.
        """
        source_map: SourceMap = {}

        try:
            root = yaml.compose(content, Loader=yaml.SafeLoader)
        except yaml.YAMLError as exc:
            # Locations are best effort; the parse itself reports real errors.
            logger.debug(f"No source map available: {exc}")
            return source_map

        if root is None:
            return source_map

        def _walk(node, path: str) -> None:
            mark = node.start_mark
            # PyYAML uses 0-based line/column
            source_map[path] = {"line": mark.line + 1, "column": mark.column + 1}

            if isinstance(node, yaml.nodes.MappingNode):
                for key_node, value_node in node.value:
                    _walk(value_node, f"{path}/{escape_token(str(key_node.value))}")
            elif isinstance(node, yaml.nodes.SequenceNode):
                for index, item_node in enumerate(node.value):
                    _walk(item_node, f"{path}/{index}")

        _walk(root, "")
        return source_map

    def load(self, file_path: Union[str, Path]) -> LoadedDocument:
        """Load a document file; ``.yaml``/``.yml`` are YAML, anything else JSON.

        Raises:
            DocumentError: If the file cannot be read or parsed.
        """
        path = Path(file_path)

        if not path.exists():
            raise DocumentError(f"Document file not found: {path}")

        if not path.is_file():
            raise DocumentError(f"Path is not a file: {path}")

        if self.cache_enabled and path in self._cache:
            logger.debug(f"Loading document from cache: {path}")
            return self._cache[path]

        logger.debug(f"Loading document file: {path}")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentError(f"Failed to read document file {path}: {exc}") from exc

        is_yaml = path.suffix.lower() in YAML_SUFFIXES
        try:
            loaded = self.load_text(content, yaml_format=is_yaml)
        except DocumentError as exc:
            raise DocumentError(f"{path}: {exc}") from exc

        document = LoadedDocument(data=loaded.data, source_map=loaded.source_map, file_path=path)
        if self.cache_enabled:
            self._cache[path] = document
        return document

    def load_text(self, content: str, *, yaml_format: bool = False) -> LoadedDocument:
        """Parse document text held in memory.

        Raises:
            DocumentError: If the text cannot be parsed.
        """
        if yaml_format:
            try:
                data = _normalize_yaml(yaml.safe_load(content))
            except yaml.YAMLError as exc:
                raise DocumentError(f"Failed to parse YAML content: {exc}") from exc
        else:
            data = parse_json(content)
        return LoadedDocument(data=data, source_map=self.build_source_map(content))

    def clear_cache(self) -> None:
        """Clear the document cache."""
        self._cache.clear()
        logger.debug("Document cache cleared")


# Global loader instance
document_loader = DocumentLoader()
