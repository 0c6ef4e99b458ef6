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

"""Assertions for the ``format`` keyword.

Only string instances are checked; unknown format names always pass and
are dropped at compile time.
"""

from __future__ import annotations

import ipaddress
import re
from datetime import date
from typing import Callable, Dict
from urllib.parse import urlsplit

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TIME_RE = re.compile(
    r"^(\d{2}):(\d{2}):(\d{2})(?:\.\d+)?(?:[Zz]|([+-])(\d{2}):(\d{2}))$"
)
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+$")
_HOSTNAME_LABEL_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
_URI_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")
_UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_JSON_POINTER_RE = re.compile(r"^(?:/(?:[^/~]|~[01])*)*$")
_URI_FORBIDDEN = re.compile(r"[\s<>\"{}|\\^`]")


def _is_date(value: str) -> bool:
    m = _DATE_RE.match(value)
    if m is None:
        return False
    try:
        date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return False
    return True


def _is_time(value: str) -> bool:
    m = _TIME_RE.match(value)
    if m is None:
        return False
    hour, minute, second = int(m.group(1)), int(m.group(2)), int(m.group(3))
    if hour > 23 or minute > 59 or second > 60:
        return False
    if m.group(4) is not None:
        if int(m.group(5)) > 23 or int(m.group(6)) > 59:
            return False
    return True


def _is_date_time(value: str) -> bool:
    parts = re.split(r"[Tt]", value)
    if len(parts) != 2:
        return False
    return _is_date(parts[0]) and _is_time(parts[1])


def _is_email(value: str) -> bool:
    if _EMAIL_RE.match(value) is None:
        return False
    local = value.rsplit("@", 1)[0]
    return not (local.startswith(".") or local.endswith(".") or ".." in local)


def _is_hostname(value: str) -> bool:
    name = value[:-1] if value.endswith(".") else value
    if not name or len(name) > 253:
        return False
    return all(_HOSTNAME_LABEL_RE.match(label) for label in name.split("."))


def _is_ipv4(value: str) -> bool:
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        return False
    return True


def _is_ipv6(value: str) -> bool:
    if "%" in value:
        return False
    try:
        ipaddress.IPv6Address(value)
    except ValueError:
        return False
    return True


def _is_uri_reference(value: str) -> bool:
    if _URI_FORBIDDEN.search(value):
        return False
    try:
        urlsplit(value)
    except ValueError:
        return False
    return True


def _is_uri(value: str) -> bool:
    if not _is_uri_reference(value):
        return False
    scheme = urlsplit(value).scheme
    return bool(scheme) and _URI_SCHEME_RE.match(scheme) is not None


def _is_regex(value: str) -> bool:
    try:
        re.compile(value)
    except re.error:
        return False
    return True


_FORMAT_CHECKERS: Dict[str, Callable[[str], bool]] = {
    "date": _is_date,
    "time": _is_time,
    "date-time": _is_date_time,
    "email": _is_email,
    "hostname": _is_hostname,
    "ipv4": _is_ipv4,
    "ipv6": _is_ipv6,
    "uri": _is_uri,
    "uri-reference": _is_uri_reference,
    "uuid": lambda value: _UUID_RE.match(value) is not None,
    "regex": _is_regex,
    "json-pointer": lambda value: _JSON_POINTER_RE.match(value) is not None,
}


def is_known_format(name: str) -> bool:
    return name in _FORMAT_CHECKERS


def check_format(name: str, value: str) -> bool:
    checker = _FORMAT_CHECKERS.get(name)
    if checker is None:
        return True
    return checker(value)
