"""Identity matching rules.

Each structured rule is a pure filter ``(query, candidates) -> candidates``. The
resolver applies them in order and stops as soon as one leaves a single candidate.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..core.enums import MatchType
from ..employees.model import EmployeeIdentity
from .model import NameQuery
from .similarity import similarity

NameRule = Callable[[NameQuery, Sequence[EmployeeIdentity]], list[EmployeeIdentity]]


def normalize_name(raw_identifier: Optional[str], raw_name: Optional[str]) -> NameQuery:
    """Split a device name into first token and the remaining tokens.

    "Rishabh Y" -> first="Rishabh", last="Y"; "R Yadav" -> first="R", last="Yadav".
    """

    name = raw_name.strip() if isinstance(raw_name, str) else ""
    parts = name.split()
    first = parts[0] if parts else ""
    last = " ".join(parts[1:])
    return NameQuery(
        raw_identifier=str(raw_identifier or "").strip(),
        raw_name=name,
        first=first,
        last=last,
    )


def direct_id_match(query: NameQuery, candidates: Sequence[EmployeeIdentity]) -> Optional[EmployeeIdentity]:
    if not query.raw_identifier:
        return None
    wanted = query.raw_identifier.lower()
    for emp in candidates:
        if emp.biometric_code and str(emp.biometric_code).strip().lower() == wanted:
            return emp
    return None


def first_name_exact(query: NameQuery, candidates: Sequence[EmployeeIdentity]) -> list[EmployeeIdentity]:
    if not query.first:
        return []
    wanted = query.first.lower()
    return [emp for emp in candidates if emp.first_name and emp.first_name.strip().lower() == wanted]


def surname_initial(query: NameQuery, candidates: Sequence[EmployeeIdentity]) -> list[EmployeeIdentity]:
    if not query.last or not candidates:
        return list(candidates)
    initial = query.last[0].lower()
    return [emp for emp in candidates if emp.last_name and emp.last_name.strip()[:1].lower() == initial]


def last_name_prefix(query: NameQuery, candidates: Sequence[EmployeeIdentity]) -> list[EmployeeIdentity]:
    if not query.last or not candidates:
        return list(candidates)
    bio_last = query.last.lower().strip()

    matches: list[EmployeeIdentity] = []
    for emp in candidates:
        if not emp.last_name:
            continue
        emp_last = emp.last_name.lower().strip()
        if emp_last == bio_last:
            matches.append(emp)
            continue
        n = min(3, len(bio_last), len(emp_last))
        if n and bio_last[:n] == emp_last[:n]:
            matches.append(emp)
    return matches


# Structured rules after the direct ID match, with the match type and confidence
# reported when the rule leaves exactly one candidate.
STRUCTURED_RULES: tuple[tuple[NameRule, MatchType, float], ...] = (
    (first_name_exact, MatchType.FIRST_NAME_EXACT, 0.9),
    (surname_initial, MatchType.FIRST_NAME_SURNAME_INITIAL, 0.85),
    (last_name_prefix, MatchType.FIRST_NAME_LAST_NAME_PREFIX, 0.8),
)


def name_forms(emp: EmployeeIdentity) -> list[str]:
    """Lowercased forms compared during fuzzy matching: full, first, first + surname initial."""

    first = (emp.first_name or "").strip().lower()
    last = (emp.last_name or "").strip().lower()
    forms = [f"{first} {last}".strip(), first]
    if first and last:
        forms.append(f"{first} {last[0]}")
    return forms


def fuzzy_scores(
    raw_name: str,
    candidates: Sequence[EmployeeIdentity],
    *,
    threshold: float,
) -> list[tuple[EmployeeIdentity, float]]:
    """Candidates at or above ``threshold``, best first; equal scores keep directory order."""

    wanted = (raw_name or "").strip().lower()
    if not wanted:
        return []

    scored: list[tuple[EmployeeIdentity, float]] = []
    for emp in candidates:
        score = max(similarity(wanted, form) for form in name_forms(emp))
        if score >= threshold:
            scored.append((emp, score))
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored
