from __future__ import annotations

from ...core.enums import MergeCase, Source
from .base import MergeDecision, MergeInputs, MergeStrategy


class NoOutStrategy(MergeStrategy):
    """An IN exists but neither source has an OUT."""

    case = MergeCase.NO_OUT

    def decide(self, inputs: MergeInputs) -> MergeDecision:
        if inputs.wf_in is not None:
            final_in, in_source = inputs.wf_in, Source.WORKFLOW
        else:
            final_in, in_source = inputs.bio_in, Source.BIOMETRIC
        return MergeDecision(
            final_in=final_in,
            final_out=None,
            in_source=in_source,
            out_source=None,
            remarks="NO_PUNCH_OUT",
        )


class IncompleteStrategy(MergeStrategy):
    case = MergeCase.INCOMPLETE

    def decide(self, inputs: MergeInputs) -> MergeDecision:
        return MergeDecision(final_in=None, final_out=None, in_source=None, out_source=None, remarks="INCOMPLETE_DATA")
