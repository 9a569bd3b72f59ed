from __future__ import annotations

from ...core.enums import MergeCase, Source
from .base import MergeDecision, MergeInputs, MergeStrategy


class BothMatchedStrategy(MergeStrategy):
    """Both sources agree within tolerance: earliest IN, latest OUT."""

    case = MergeCase.BOTH_MATCHED

    def __init__(self, tolerance_minutes: int):
        self._tolerance = int(tolerance_minutes)

    def decide(self, inputs: MergeInputs) -> MergeDecision:
        # Ties go to the workflow side.
        if inputs.bio_in < inputs.wf_in:
            final_in, in_source = inputs.bio_in, Source.BIOMETRIC
        else:
            final_in, in_source = inputs.wf_in, Source.WORKFLOW
        if inputs.bio_out > inputs.wf_out:
            final_out, out_source = inputs.bio_out, Source.BIOMETRIC
        else:
            final_out, out_source = inputs.wf_out, Source.WORKFLOW

        return MergeDecision(
            final_in=final_in,
            final_out=final_out,
            in_source=in_source,
            out_source=out_source,
            remarks=f"MATCHED (within {self._tolerance}min tolerance)",
        )


class BothMismatchStrategy(MergeStrategy):
    """Sources disagree beyond tolerance: each side comes from its trusted source."""

    case = MergeCase.BOTH_MISMATCH

    def __init__(self, *, in_source: Source = Source.BIOMETRIC, out_source: Source = Source.WORKFLOW):
        self._in_source = in_source
        self._out_source = out_source

    def decide(self, inputs: MergeInputs) -> MergeDecision:
        return MergeDecision(
            final_in=inputs.pick_in(self._in_source),
            final_out=inputs.pick_out(self._out_source),
            in_source=self._in_source,
            out_source=self._out_source,
            remarks=(
                f"MISMATCH (IN diff={inputs.in_diff_minutes}min, OUT diff={inputs.out_diff_minutes}min)"
            ),
        )
