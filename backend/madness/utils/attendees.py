"""
Attendee normalization.

Option attendee data arrives in several shapes. One parse, in this order:
  1. boolean literal  True / "true"  -> everyone,  False / "false" / None -> nobody
  2. list/tuple of names
  3. JSON array string  '["Ann", "Bo"]'
  4. comma or pipe delimited string  "Ann, Bo | Cy"; a surrounding [ ] and
     quotes around each name are dropped

Vote weight: 1.0 if the voter attended, 0.5 otherwise.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable

from madness.services.score_aggregator import ABSENT_WEIGHT, ATTENDED_WEIGHT

EVERYONE = "everyone"
NOBODY = "nobody"
NAMED = "named"

_DELIMITERS = re.compile(r"[,|]")


@dataclass(frozen=True)
class AttendeeList:
    kind: str  # EVERYONE | NOBODY | NAMED
    names: FrozenSet[str] = frozenset()

    def includes(self, name: str) -> bool:
        if self.kind == EVERYONE:
            return True
        if self.kind == NOBODY or not name:
            return False
        wanted = name.strip().casefold()
        return any(n.casefold() == wanted for n in self.names)


def _named(values: Iterable[Any]) -> AttendeeList:
    names = frozenset(str(v).strip() for v in values if v is not None and str(v).strip())
    return AttendeeList(kind=NAMED, names=names)


def parse_attendees(raw: Any) -> AttendeeList:
    if raw is True or (isinstance(raw, str) and raw.strip().lower() == "true"):
        return AttendeeList(kind=EVERYONE)
    if raw is None or raw is False or (isinstance(raw, str) and raw.strip().lower() in ("false", "")):
        return AttendeeList(kind=NOBODY)

    if isinstance(raw, (list, tuple, set, frozenset)):
        return _named(raw)

    text = str(raw).strip()

    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return _named(parsed)

    # array-looking text that is not JSON, e.g. "[Ann, Bo]" or "['Ann', 'Bo']"
    if text.startswith("[") and text.endswith("]"):
        text = text[1:-1]
    return _named(part.strip().strip("\"'") for part in _DELIMITERS.split(text))


def vote_weight(raw_attendees: Any, tenant_name: str) -> float:
    if parse_attendees(raw_attendees).includes(tenant_name):
        return ATTENDED_WEIGHT
    return ABSENT_WEIGHT
