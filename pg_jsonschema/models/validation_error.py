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

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from ..utils.json_pointer import PathToken, display_pointer, format_pointer


@dataclass(frozen=True)
class ValidationError:
    """One way in which an instance fails its schema.

    ``context`` holds the per-branch errors of a failed ``anyOf``/``oneOf``;
    it is not part of equality, so deduplication only looks at the
    (instance path, schema path, message) triple.
    """

    instance_path: Tuple[PathToken, ...]
    schema_path: Tuple[PathToken, ...]
    keyword: str
    message: str
    context: Tuple["ValidationError", ...] = field(default=(), compare=False)

    @property
    def instance_pointer(self) -> str:
        return format_pointer(self.instance_path)

    @property
    def schema_pointer(self) -> str:
        return format_pointer(self.schema_path)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        data = {
            "instance_path": self.instance_pointer,
            "schema_path": self.schema_pointer,
            "keyword": self.keyword,
            "message": self.message,
        }
        if self.context:
            data["context"] = [error.to_dict() for error in self.context]
        return data


def make_error(
    keyword: str,
    detail: str,
    instance_path: Tuple[PathToken, ...],
    schema_path: Tuple[PathToken, ...],
    context: Tuple[ValidationError, ...] = (),
) -> ValidationError:
    message = f"{keyword}: {detail} at {display_pointer(instance_path)}"
    return ValidationError(
        instance_path=instance_path,
        schema_path=schema_path,
        keyword=keyword,
        message=message,
        context=context,
    )
