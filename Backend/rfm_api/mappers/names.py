"""
Person names as the Users and customer_accounts tables store them.

Both tables keep a single space-joined FullName column; the API works with
first/middle/last parts.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NameCasePolicy(str, Enum):
    PRESERVE = "preserve"
    UPPER = "upper"


@dataclass(frozen=True)
class PersonName:
    first: str
    last: str
    middle: Optional[str] = None


def split_full_name(full_name: Optional[str]) -> PersonName:
    """
    Split a stored FullName on whitespace runs.

    One token -> first only, two -> first/last, three or more -> first, last and
    everything in between as the middle name.
    """
    tokens = str(full_name).split() if full_name else []
    if not tokens:
        return PersonName(first="", last="")
    if len(tokens) == 1:
        return PersonName(first=tokens[0], last="")
    if len(tokens) == 2:
        return PersonName(first=tokens[0], last=tokens[1])
    return PersonName(first=tokens[0], last=tokens[-1], middle=" ".join(tokens[1:-1]))


def join_full_name(name: PersonName, case_policy: NameCasePolicy = NameCasePolicy.PRESERVE) -> str:
    parts = [p.strip() for p in (name.first, name.middle, name.last) if p and p.strip()]
    full_name = " ".join(parts)
    if NameCasePolicy(case_policy) is NameCasePolicy.UPPER:
        return full_name.upper()
    return full_name
