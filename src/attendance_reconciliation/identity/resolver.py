from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import DEFAULT_FUZZY_CLEAR_WINNER_MARGIN, DEFAULT_FUZZY_THRESHOLD
from ..core.enums import MatchType, ResolutionErrorCode
from ..employees.model import EmployeeIdentity
from .model import BatchResolution, Candidate, ResolutionResult
from .rules import STRUCTURED_RULES, direct_id_match, fuzzy_scores, normalize_name


class IdentityResolver:
    """Maps a raw biometric identifier/name to exactly one directory entry.

    Pure function of its inputs: no I/O, no mutation of the directory.
    """

    def __init__(
        self,
        *,
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
        clear_winner_margin: float = DEFAULT_FUZZY_CLEAR_WINNER_MARGIN,
        logger: Optional[logging.Logger] = None,
    ):
        self._threshold = float(fuzzy_threshold)
        self._margin = float(clear_winner_margin)
        self._log = logger or logging.getLogger(__name__)

    def resolve(
        self,
        raw_identifier: Optional[str],
        raw_name: Optional[str],
        directory: Sequence[EmployeeIdentity],
    ) -> ResolutionResult:
        if not directory:
            return ResolutionResult.failed(ResolutionErrorCode.EMPTY_DIRECTORY, "Employee directory is empty")

        query = normalize_name(raw_identifier, raw_name)

        direct = direct_id_match(query, directory)
        if direct:
            self._log.debug("Direct ID match for %r -> %s", query.raw_identifier, direct.employee_id)
            return ResolutionResult.matched(direct, MatchType.DIRECT_ID_MATCH, 1.0)

        candidates: Sequence[EmployeeIdentity] = directory
        exhausted = False
        for rule, match_type, confidence in STRUCTURED_RULES:
            narrowed = rule(query, candidates)
            if len(narrowed) == 1:
                self._log.debug("%s for %r -> %s", match_type.value, query.raw_name, narrowed[0].employee_id)
                return ResolutionResult.matched(narrowed[0], match_type, confidence)
            if not narrowed:
                exhausted = True
                break
            candidates = narrowed

        # A rule that leaves nobody sends the fuzzy rule back to the whole directory.
        pool = directory if exhausted else candidates
        scored = fuzzy_scores(query.raw_name, pool, threshold=self._threshold)
        if len(scored) == 1:
            emp, score = scored[0]
            return ResolutionResult.matched(emp, MatchType.FUZZY_MATCH, score, remarks=self._remark(query.raw_name, emp))
        if len(scored) > 1:
            (best, best_score), (_, second_score) = scored[0], scored[1]
            if best_score - second_score > self._margin:
                return ResolutionResult.matched(
                    best, MatchType.FUZZY_MATCH_BEST, best_score, remarks=self._remark(query.raw_name, best)
                )
            self._log.info("Ambiguous fuzzy match for %r: %d candidates", query.raw_name, len(scored))
            return ResolutionResult.failed(
                ResolutionErrorCode.AMBIGUOUS_MATCH,
                "Ambiguous match - multiple employees",
                candidates=tuple(Candidate.of(emp, score) for emp, score in scored),
            )

        if not exhausted:
            self._log.info("Ambiguous structured match for %r: %d candidates", query.raw_name, len(candidates))
            return ResolutionResult.failed(
                ResolutionErrorCode.AMBIGUOUS_MATCH,
                "Ambiguous match - multiple employees",
                candidates=tuple(Candidate.of(emp) for emp in candidates),
            )

        self._log.info("No employee for biometric %r (ID: %r)", query.raw_name, query.raw_identifier)
        return ResolutionResult.failed(ResolutionErrorCode.NO_MATCH_FOUND, "No matching employee found")

    def resolve_batch(self, items: Iterable[Any], directory: Sequence[EmployeeIdentity]) -> BatchResolution:
        """Resolve objects exposing ``raw_identifier`` / ``raw_name`` (e.g. raw punches)."""

        batch = BatchResolution()
        for item in items:
            result = self.resolve(getattr(item, "raw_identifier", None), getattr(item, "raw_name", None), directory)
            if result.success:
                batch.successful.append((item, result))
                key = result.match_type.value
                batch.by_type[key] = batch.by_type.get(key, 0) + 1
            elif result.is_ambiguous:
                batch.ambiguous.append((item, result))
            else:
                batch.failed.append((item, result))
        return batch

    @staticmethod
    def _remark(raw_name: str, emp: EmployeeIdentity) -> str:
        return f'Fuzzy match: "{raw_name}" <-> "{emp.full_name}"'
