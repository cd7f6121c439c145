"""Swap - форма обмена и жизненный цикл отправки.

- validate(): полный пересчёт ошибок формы (чистая функция)
- SwapFormController: состояние формы, конверсия, is_submittable
- SwapSubmissionFlow: preview → confirm → settled → auto-reset
"""

from .form_controller import FormState, SwapFormController, derive_state
from .submission_flow import (
    SettlementError,
    SimulatedSettlement,
    SubmissionTransition,
    SwapFlowConfig,
    SwapSubmissionFlow,
    asyncio_scheduler,
)
from .validation import (
    amount_to_text,
    is_amount_text,
    parse_amount,
    validate,
)

__all__ = [
    # Validation
    "validate",
    "is_amount_text",
    "parse_amount",
    "amount_to_text",
    # Form
    "SwapFormController",
    "FormState",
    "derive_state",
    # Submission
    "SwapSubmissionFlow",
    "SubmissionTransition",
    "SwapFlowConfig",
    "SettlementError",
    "SimulatedSettlement",
    "asyncio_scheduler",
]
