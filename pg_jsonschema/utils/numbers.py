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

import math
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Optional


def is_number(value: Any) -> bool:
    """True for JSON numbers; booleans are not numbers."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float, Decimal))


def to_decimal(value: Any) -> Decimal:
    """Convert a JSON number to an exact Decimal.

    Floats go through their shortest repr so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid numeric value '{value}'")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value))
    raise ValueError(f"Invalid numeric value '{value}'")


def is_integral(value: Any) -> bool:
    """True when a JSON number has no fractional component (``1.0`` counts)."""
    if not is_number(value):
        return False
    if isinstance(value, int):
        return True
    dec = to_decimal(value)
    if not dec.is_finite():
        return False
    return dec == dec.to_integral_value()


def coerce_non_negative_int(value: Any) -> Optional[int]:
    """Return an int for non-negative integral JSON numbers, else None."""
    if not is_integral(value):
        return None
    number = int(to_decimal(value))
    if number < 0:
        return None
    return number


def is_multiple_of(value: Any, divisor: Decimal) -> bool:
    dividend = to_decimal(value)
    if not dividend.is_finite():
        return False
    try:
        with localcontext() as ctx:
            ctx.prec = 400
            return dividend % divisor == 0
    except InvalidOperation:
        # Quotient too large for the context; fall back to binary floats.
        quotient = float(dividend) / float(divisor)
        if math.isinf(quotient) or math.isnan(quotient):
            return False
        return quotient.is_integer()
