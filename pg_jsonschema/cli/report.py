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

"""Result container for validating one document file."""

from pathlib import Path
from typing import Any, Dict, List, Optional


class ValidationReport:
    """Container for the validation errors of a single file."""

    def __init__(self, file_path: Path):
        """Initialize the report.

        Args:
            file_path: Path to the validated file
        """
        self.file_path = file_path
        self.errors: List[Dict[str, Any]] = []

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
        pointer: Optional[str] = None,
        schema_path: Optional[str] = None,
    ):
        """Add an error message.

        Args:
            message: Error message
            line: Optional 1-based line of the offending value
            column: Optional 1-based column of the offending value
            pointer: Optional JSON pointer of the offending value
            schema_path: Optional JSON pointer of the failing schema keyword
        """
        error = {'message': message}
        if line is not None:
            error['line'] = line
        if column is not None:
            error['column'] = column
        if pointer is not None:
            error['pointer'] = pointer
        if schema_path is not None:
            error['schema_path'] = schema_path
        self.errors.append(error)
