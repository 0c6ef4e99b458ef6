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

"""Custom exceptions for the pg_jsonschema engine.

Instance mismatches are not exceptions: they are returned as
:class:`pg_jsonschema.models.validation_error.ValidationError` data.
"""


class JsonSchemaError(Exception):
    """Base exception for pg_jsonschema related errors."""
    pass


class ConfigurationError(JsonSchemaError):
    """Exception raised for invalid engine configuration values."""
    pass


class DocumentError(JsonSchemaError):
    """Exception raised when text or a Python object is not a JSON document."""
    pass


class CompileError(JsonSchemaError):
    """Exception raised when a schema cannot be compiled into a plan."""

    def __init__(self, keyword: str, detail: str):
        self.keyword = keyword
        self.detail = detail
        super().__init__(f"{keyword}: {detail}" if keyword else detail)


class InvalidSchemaShape(CompileError):
    """A keyword value has a shape the keyword does not accept."""
    pass


class UnresolvedReference(CompileError):
    """A ``$ref`` target is not known after the whole document was compiled."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__("$ref", f"unresolved reference '{identifier}'")


class UnsupportedDraftFeature(CompileError):
    """The schema uses a dialect or keyword this engine does not implement."""

    def __init__(self, keyword: str, detail: str = ""):
        super().__init__(keyword, detail or "not supported by this engine")


class ValidationExecutionError(JsonSchemaError):
    """Exception raised when a plan cannot be executed against an instance.

    This signals an engine-side invariant violation (dangling reference,
    non-terminating reference cycle, excessive depth), never an ordinary
    instance mismatch.
    """
    pass
