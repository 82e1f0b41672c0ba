"""User Filter — composable multi-criteria narrowing of an in-memory user snapshot.

Invariants:
    - Pure functions: no IO, no async, no DB; input sequences are never mutated
    - Result order equals the relative order of matches in the input (stable)
    - A criterion is absent when None, empty, or whitespace-only; absent imposes no constraint
    - Names and phone match by PREFIX; email matches by SUBSTRING
    - Case folding is str.lower(); trimming is str.strip(); internal whitespace is significant
    - Single-field predicates require a non-None records sequence (assert-guarded);
      only filter_users tolerates None

Design Decisions:
    - Sequential narrowing (first_name -> last_name -> email -> phone), each stage on the
      previous stage's output, instead of intersecting independent passes
    - Email is substring-matched so callers can search by domain or any fragment
"""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from usermanagement.core.domain_types import UserRecord

logger = logging.getLogger(__name__)

Predicate = Callable[[Sequence[UserRecord], str], list[UserRecord]]


def _is_absent(term: str | None) -> bool:
    return term is None or not term.strip()


def _normalize(term: str | None) -> str | None:
    """Trim a criterion; absent criteria become None."""
    if term is None:
        return None
    term = term.strip()
    return term or None


def _log_stage(field: str, term: str, before: int, after: int) -> None:
    logger.debug(
        f"Filter {field} '{term}': {after}/{before} matched",
        extra={"match_count": after},
    )


def filter_by_first_name(
    records: Sequence[UserRecord], term: str | None,
) -> list[UserRecord]:
    """Keep records whose first name starts with term (case-insensitive)."""
    assert records is not None, "filter_by_first_name requires a records sequence"
    if _is_absent(term):
        return list(records)
    needle = term.lower().strip()
    matched = [
        r for r in records if r.first_name.lower().strip().startswith(needle)
    ]
    _log_stage("first_name", needle, len(records), len(matched))
    return matched


def filter_by_last_name(
    records: Sequence[UserRecord], term: str | None,
) -> list[UserRecord]:
    """Keep records whose last name starts with term (case-insensitive).

    Records without a last name are skipped. An absent term returns a
    shallow copy of the input, never the input object itself.
    """
    assert records is not None, "filter_by_last_name requires a records sequence"
    if _is_absent(term):
        return list(records)
    needle = term.lower().strip()
    matched = []
    for record in records:
        if record.last_name is None:
            logger.debug(f"Skipping user {record.id}: no last name")
            continue
        if record.last_name.lower().strip().startswith(needle):
            matched.append(record)
    _log_stage("last_name", needle, len(records), len(matched))
    return matched


def filter_by_email(
    records: Sequence[UserRecord], term: str | None,
) -> list[UserRecord]:
    """Keep records whose email contains term anywhere (case-insensitive)."""
    assert records is not None, "filter_by_email requires a records sequence"
    if _is_absent(term):
        return list(records)
    needle = term.lower().strip()
    matched = [r for r in records if needle in r.email.lower().strip()]
    _log_stage("email", needle, len(records), len(matched))
    return matched


def filter_by_phone(
    records: Sequence[UserRecord], term: str | None,
) -> list[UserRecord]:
    """Keep records whose phone starts with term. No case folding."""
    assert records is not None, "filter_by_phone requires a records sequence"
    if _is_absent(term):
        return list(records)
    needle = term.strip()
    matched = [r for r in records if r.phone.strip().startswith(needle)]
    _log_stage("phone", needle, len(records), len(matched))
    return matched


@dataclass(frozen=True)
class FilterCriteria:
    """Four optional criteria, AND-ed together."""
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None

    def normalized(self) -> "FilterCriteria":
        return FilterCriteria(
            first_name=_normalize(self.first_name),
            last_name=_normalize(self.last_name),
            email=_normalize(self.email),
            phone=_normalize(self.phone),
        )

    @property
    def is_empty(self) -> bool:
        n = self.normalized()
        return all(
            v is None for v in (n.first_name, n.last_name, n.email, n.phone)
        )


def filter_users(
    records: Sequence[UserRecord] | None,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
) -> list[UserRecord]:
    """Apply every present criterion in fixed order. None records -> []."""
    if records is None:
        return []
    criteria = FilterCriteria(first_name, last_name, email, phone).normalized()
    stages: list[tuple[str | None, Predicate]] = [
        (criteria.first_name, filter_by_first_name),
        (criteria.last_name, filter_by_last_name),
        (criteria.email, filter_by_email),
        (criteria.phone, filter_by_phone),
    ]

    filtered = list(records)
    for term, predicate in stages:
        if term is None:
            continue
        filtered = predicate(filtered, term)
        if not filtered:
            break

    logger.debug(
        f"filter_users: {len(filtered)}/{len(records)} users matched",
        extra={"match_count": len(filtered)},
    )
    return filtered


def filter_users_by_criteria(
    records: Sequence[UserRecord] | None, criteria: FilterCriteria,
) -> list[UserRecord]:
    return filter_users(
        records,
        criteria.first_name, criteria.last_name,
        criteria.email, criteria.phone,
    )
