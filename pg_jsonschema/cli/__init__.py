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

"""Command line validation of JSON/YAML documents against a schema."""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from ..compiler import compile_schema
from ..config import EngineConfig
from ..engine import validate_detailed
from ..exceptions import CompileError, DocumentError, ValidationExecutionError
from ..file_io import DocumentLoader, document_loader
from .report import ValidationReport

__all__ = ['validate_files', 'ValidationReport']

logger = logging.getLogger(__name__)


def validate_files(
    schema_path: Union[str, Path],
    instance_paths: List[Union[str, Path]],
    config: Optional[EngineConfig] = None,
    resources: Optional[Mapping[str, Any]] = None,
    loader: Optional[DocumentLoader] = None,
) -> List[ValidationReport]:
    """Validate instance files against one schema file.

    Args:
        schema_path: Path to the schema document
        instance_paths: Paths to the instance documents
        config: Engine configuration. If None, uses the global config.
        resources: Extra schema documents keyed by URI for ``$ref`` lookups
        loader: Document loader. If None, uses the global loader.

    Returns:
        One report per instance file, or a single report for the schema file
        if the schema cannot be loaded or compiled.
    """
    loader = loader if loader is not None else document_loader
    schema_file = Path(schema_path)

    try:
        schema = loader.load(schema_file)
        plan = compile_schema(
            schema.data, config=config, resources=resources, base_uri=schema_file.resolve().as_uri()
        )
    except (DocumentError, CompileError) as exc:
        report = ValidationReport(schema_file)
        report.add_error(f"Invalid schema: {exc}")
        return [report]

    results = []
    for instance_path in instance_paths:
        report = ValidationReport(Path(instance_path))
        results.append(report)
        try:
            instance = loader.load(instance_path)
            errors = validate_detailed(plan, instance.data)
        except (DocumentError, ValidationExecutionError) as exc:
            report.add_error(str(exc))
            continue

        logger.debug(f"{instance_path}: {len(errors)} validation error(s)")
        for error in errors:
            loc = instance.locate(error.instance_pointer)
            report.add_error(
                error.message,
                line=loc.line,
                column=loc.column,
                pointer=error.instance_pointer,
                schema_path=error.schema_pointer,
            )

    return results
