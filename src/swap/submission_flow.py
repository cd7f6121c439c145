"""SwapSubmissionFlow - жизненный цикл отправки обмена.

Переходы:
- IDLE → PREVIEWING: запрос preview, только при is_submittable (проверяется
  синхронно внутри перехода); цифры замораживаются в SwapSnapshot
- PREVIEWING → IDLE: отмена пользователем, без побочных эффектов
- PREVIEWING → CONFIRMING: подтверждение, запуск settlement
- CONFIRMING → SETTLED: settlement успешен, показ индикатора успеха,
  запуск таймера auto-reset (сумма формы ещё не очищена)
- CONFIRMING → IDLE: settlement упал, ошибка в failure channel (logger.error),
  форма не тронута, пользователь может повторить
- SETTLED → IDLE: auto-reset по таймеру - очистка суммы, скрытие индикатора

Повторный confirm во время CONFIRMING - no-op (ровно одна попытка settlement).
Таймер auto-reset отменяется при dispose() до срабатывания. Settlement,
завершившийся после dispose(), переводит flow в IDLE без таймера.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from src.core.domain.swap import SubmissionStatus, SwapSnapshot, SwapSubmission
from src.core.math.conversion import format_display
from src.core.math.numerical_safeguards import validate_non_negative, validate_positive
from src.swap.form_controller import FormState, SwapFormController
from src.swap.validation import parse_amount

logger = logging.getLogger(__name__)

Settlement = Callable[[SwapSnapshot], Awaitable[Any]]
Scheduler = Callable[[float, Callable[[], None]], Any]
Clock = Callable[[], datetime]


class SettlementError(Exception):
    """
    Settlement коллаборатор сообщил о неудаче.

    Не бросается из confirm(): возвращается в SubmissionTransition.error.
    Автоматического retry нет.
    """
    pass


# =============================================================================
# КОЛЛАБОРАТОРЫ ПО УМОЛЧАНИЮ
# =============================================================================


def asyncio_scheduler(delay_sec: float, action: Callable[[], None]) -> asyncio.TimerHandle:
    """schedule(delay, action) → handle с cancel(), на текущем event loop."""
    return asyncio.get_running_loop().call_later(delay_sec, action)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SimulatedSettlement:
    """Имитация settlement backend: задержка и успех."""

    def __init__(self, delay_sec: float = 2.0):
        validate_non_negative(delay_sec, "delay_sec")
        self.delay_sec = delay_sec

    async def __call__(self, snapshot: SwapSnapshot) -> None:
        await asyncio.sleep(self.delay_sec)
        logger.info(
            "Simulated settlement: %s %s -> %s %s",
            snapshot.source_amount_text,
            snapshot.source_symbol,
            snapshot.target_amount_text,
            snapshot.target_symbol,
        )


# =============================================================================
# CONFIG / RESULT
# =============================================================================


@dataclass(frozen=True)
class SwapFlowConfig:
    """Конфигурация flow: длительность показа успеха до auto-reset."""
    reset_delay_sec: float = 3.0

    def __post_init__(self):
        validate_positive(self.reset_delay_sec, "reset_delay_sec")


@dataclass(frozen=True)
class SubmissionTransition:
    """Результат перехода (или отказа в переходе) flow."""

    new_status: SubmissionStatus
    previous_status: SubmissionStatus
    transition_occurred: bool
    transition_reason: str

    # Для отладки
    details: str = ""

    snapshot: Optional[SwapSnapshot] = None
    error: Optional[SettlementError] = None


# =============================================================================
# FLOW
# =============================================================================


class SwapSubmissionFlow:
    """State machine отправки обмена.

    Единственный writer статуса SwapSubmission. Все переходы выполняются
    до конца без чередования; приостанавливается только await settlement.
    """

    def __init__(
        self,
        controller: SwapFormController,
        settlement: Optional[Settlement] = None,
        config: Optional[SwapFlowConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Args:
            controller: контроллер формы (источник is_submittable и данных preview)
            settlement: async операция settlement (default: SimulatedSettlement)
            config: конфигурация flow
            scheduler: schedule(delay, action) → handle с cancel()
            clock: источник времени для started_at/settled_at
        """
        self.controller = controller
        self.settlement = settlement or SimulatedSettlement()
        self.config = config or SwapFlowConfig()
        self._scheduler = scheduler or asyncio_scheduler
        self._clock = clock or utc_now

        self._status = SubmissionStatus.IDLE
        self._submission: Optional[SwapSubmission] = None
        self._reset_handle: Optional[Any] = None
        self._disposed = False

        self.last_submission: Optional[SwapSubmission] = None
        self.last_error: Optional[SettlementError] = None

    # -------------------------------------------------------------------------
    # Read-only значения
    # -------------------------------------------------------------------------

    @property
    def status(self) -> SubmissionStatus:
        return self._status

    @property
    def submission(self) -> Optional[SwapSubmission]:
        return self._submission

    @property
    def show_success(self) -> bool:
        return self._status == SubmissionStatus.SETTLED

    @property
    def is_confirming(self) -> bool:
        return self._status == SubmissionStatus.CONFIRMING

    @property
    def can_preview(self) -> bool:
        """Состояние кнопки Preview (для отрисовки; переход перепроверяет)."""
        return (
            not self._disposed
            and self._status == SubmissionStatus.IDLE
            and self.controller.is_submittable
        )

    # -------------------------------------------------------------------------
    # Переходы
    # -------------------------------------------------------------------------

    def request_preview(self) -> SubmissionTransition:
        """IDLE → PREVIEWING с заморозкой цифр."""
        if self._disposed:
            return self._rejected("flow_disposed")

        if self._status != SubmissionStatus.IDLE:
            return self._rejected(f"not_idle_{self._status.value}")

        state = self.controller.revalidate()
        if not state.is_submittable:
            return self._rejected(
                "form_not_submittable",
                details=f"errors={[e.message for e in state.errors.values()]}",
            )

        snapshot = self._capture_snapshot(state)
        self._submission = SwapSubmission(
            status=SubmissionStatus.PREVIEWING,
            snapshot=snapshot,
            started_at=snapshot.captured_at,
        )
        return self._move_to(
            SubmissionStatus.PREVIEWING,
            "preview_requested",
            details=(
                f"{snapshot.source_amount_text} {snapshot.source_symbol} → "
                f"{snapshot.target_amount_text} {snapshot.target_symbol} "
                f"@ {snapshot.exchange_rate_text}"
            ),
        )

    def cancel(self) -> SubmissionTransition:
        """PREVIEWING → IDLE. Во время CONFIRMING отмена недоступна."""
        if self._status == SubmissionStatus.PREVIEWING:
            self._archive_submission(SubmissionStatus.IDLE)
            return self._move_to(SubmissionStatus.IDLE, "preview_cancelled")

        if self._status == SubmissionStatus.CONFIRMING:
            return self._rejected("cannot_cancel_while_confirming")

        return self._rejected("nothing_to_cancel")

    async def confirm(self) -> SubmissionTransition:
        """PREVIEWING → CONFIRMING → SETTLED | IDLE.

        Повторный вызов во время CONFIRMING - no-op.
        """
        if self._status == SubmissionStatus.CONFIRMING:
            return self._rejected("already_confirming")

        if self._disposed:
            return self._rejected("flow_disposed")

        if self._status != SubmissionStatus.PREVIEWING:
            return self._rejected(f"not_previewing_{self._status.value}")

        if not self.controller.revalidate().is_submittable:
            return self._rejected("form_not_submittable")

        # Статус выставляется до первого await: повторный confirm его увидит
        self._submission = self._submission.model_copy(
            update={"status": SubmissionStatus.CONFIRMING}
        )
        self._move_to(SubmissionStatus.CONFIRMING, "confirm_requested")
        snapshot = self._submission.snapshot

        try:
            await self.settlement(snapshot)
        except asyncio.CancelledError:
            self._archive_submission(SubmissionStatus.IDLE)
            self._move_to(SubmissionStatus.IDLE, "settlement_cancelled")
            raise
        except Exception as exc:
            error = SettlementError(f"Swap settlement failed: {exc}")
            error.__cause__ = exc
            logger.error(
                "Swap settlement failed for %s %s → %s",
                snapshot.source_amount_text,
                snapshot.source_symbol,
                snapshot.target_symbol,
                exc_info=exc,
            )
            self.last_error = error
            self._archive_submission(SubmissionStatus.IDLE)
            return self._move_to(
                SubmissionStatus.IDLE,
                "flow_disposed" if self._disposed else "settlement_failed",
                details=str(exc),
                snapshot=snapshot,
                error=error,
            )

        if self._disposed:
            # Без таймера auto-reset: отключённый flow сразу в IDLE
            self.last_error = None
            self._submission = self._submission.model_copy(update={"settled_at": self._clock()})
            self._archive_submission(SubmissionStatus.SETTLED)
            return self._move_to(SubmissionStatus.IDLE, "flow_disposed", snapshot=snapshot)

        self.last_error = None
        self._submission = self._submission.model_copy(
            update={"status": SubmissionStatus.SETTLED, "settled_at": self._clock()}
        )
        self._reset_handle = self._scheduler(self.config.reset_delay_sec, self._auto_reset)
        return self._move_to(
            SubmissionStatus.SETTLED,
            "settlement_succeeded",
            details=f"auto-reset in {self.config.reset_delay_sec}s",
            snapshot=snapshot,
        )

    def dispose(self) -> None:
        """Teardown: отмена таймера auto-reset, дальнейшие переходы отклоняются."""
        self._disposed = True
        self._cancel_reset_timer()

    # -------------------------------------------------------------------------
    # Внутреннее
    # -------------------------------------------------------------------------

    def _auto_reset(self) -> None:
        """SETTLED → IDLE по таймеру."""
        self._reset_handle = None
        if self._disposed or self._status != SubmissionStatus.SETTLED:
            return

        self.controller.clear_amount()
        self._archive_submission(SubmissionStatus.RESET)
        self._move_to(SubmissionStatus.IDLE, "auto_reset")

    def _cancel_reset_timer(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _capture_snapshot(self, state: FormState) -> SwapSnapshot:
        return SwapSnapshot(
            source_symbol=state.source_instrument.symbol,
            target_symbol=state.target_instrument.symbol,
            source_amount_text=state.request.source_amount_text,
            target_amount_text=state.target_amount_text,
            source_amount=parse_amount(state.request.source_amount_text),
            exchange_rate=state.exchange_rate,
            exchange_rate_text=format_display(state.exchange_rate),
            source_balance=state.source_balance,
            captured_at=self._clock(),
        )

    def _archive_submission(self, final_status: SubmissionStatus) -> None:
        if self._submission is not None:
            self.last_submission = self._submission.model_copy(update={"status": final_status})
        self._submission = None

    def _move_to(
        self,
        new_status: SubmissionStatus,
        reason: str,
        details: str = "",
        snapshot: Optional[SwapSnapshot] = None,
        error: Optional[SettlementError] = None,
    ) -> SubmissionTransition:
        previous = self._status
        self._status = new_status
        logger.info("Swap flow %s → %s (%s)", previous.value, new_status.value, reason)
        return SubmissionTransition(
            new_status=new_status,
            previous_status=previous,
            transition_occurred=True,
            transition_reason=reason,
            details=details,
            snapshot=snapshot if snapshot is not None else (
                self._submission.snapshot if self._submission is not None else None
            ),
            error=error,
        )

    def _rejected(
        self,
        reason: str,
        details: str = "",
        error: Optional[SettlementError] = None,
    ) -> SubmissionTransition:
        logger.debug("Swap flow stays %s (%s)", self._status.value, reason)
        return SubmissionTransition(
            new_status=self._status,
            previous_status=self._status,
            transition_occurred=False,
            transition_reason=reason,
            details=details,
            error=error,
        )
