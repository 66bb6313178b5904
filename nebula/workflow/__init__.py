"""nebula.workflow: Temporal.io durable settlement workflow."""

from nebula.workflow.types import SettlementOutcome as SettlementOutcome
from nebula.workflow.types import SettlementResult as SettlementResult
from nebula.workflow.types import TraitSpec as TraitSpec
from nebula.workflow.types import TransitionKind as TransitionKind
from nebula.workflow.types import TransitionRequest as TransitionRequest
