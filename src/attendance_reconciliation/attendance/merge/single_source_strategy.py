from __future__ import annotations

from ...core.enums import MergeCase, Source
from .base import MergeDecision, MergeInputs, MergeStrategy


class WorkflowOnlyStrategy(MergeStrategy):
    case = MergeCase.WF_ONLY

    def decide(self, inputs: MergeInputs) -> MergeDecision:
        return MergeDecision(
            final_in=inputs.wf_in,
            final_out=inputs.wf_out,
            in_source=Source.WORKFLOW,
            out_source=Source.WORKFLOW,
            remarks="BIO_MISSING" if inputs.bio_in is None and inputs.bio_out is None else "BIO_INCOMPLETE",
        )


class BiometricOnlyStrategy(MergeStrategy):
    case = MergeCase.BIO_ONLY

    def decide(self, inputs: MergeInputs) -> MergeDecision:
        return MergeDecision(
            final_in=inputs.bio_in,
            final_out=inputs.bio_out,
            in_source=Source.BIOMETRIC,
            out_source=Source.BIOMETRIC,
            remarks="WF_MISSING" if inputs.wf_in is None and inputs.wf_out is None else "WF_INCOMPLETE",
        )
