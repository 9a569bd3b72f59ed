from __future__ import annotations

from dataclasses import dataclass

from ...core.constants import DEFAULT_TOLERANCE_MINUTES
from ...core.enums import Source
from .base import MergeInputs, MergeStrategy
from .matched_strategy import BothMatchedStrategy, BothMismatchStrategy
from .partial_strategy import IncompleteStrategy, NoOutStrategy
from .single_source_strategy import BiometricOnlyStrategy, WorkflowOnlyStrategy


@dataclass
class MergeStrategyFactory:
    """Factory Pattern: choose the merge strategy for one employee-day (first match wins)."""

    tolerance_minutes: int = DEFAULT_TOLERANCE_MINUTES
    mismatch_in_source: Source = Source.BIOMETRIC
    mismatch_out_source: Source = Source.WORKFLOW

    def for_inputs(self, inputs: MergeInputs) -> MergeStrategy:
        if inputs.has_all_four:
            if inputs.in_diff_minutes <= self.tolerance_minutes and inputs.out_diff_minutes <= self.tolerance_minutes:
                return BothMatchedStrategy(self.tolerance_minutes)
            return BothMismatchStrategy(in_source=self.mismatch_in_source, out_source=self.mismatch_out_source)

        if inputs.workflow_complete:
            return WorkflowOnlyStrategy()
        if inputs.biometric_complete:
            return BiometricOnlyStrategy()

        if inputs.wf_out is None and inputs.bio_out is None and (inputs.wf_in or inputs.bio_in):
            return NoOutStrategy()
        return IncompleteStrategy()
