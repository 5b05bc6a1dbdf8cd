"""
Step validator.

Turns a validation key into the matching Job Runner clearance check and the
check's report into a pass/fail verdict for the operators.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from cycleshift.exceptions import ValidationError
from cycleshift.funifier.base import JobRunner
from cycleshift.models.clearance import ClearanceReport
from cycleshift.models.cycle import ValidationResult
from cycleshift.utils.logger import get_logger
from cycleshift.workflows.loader import ValidationKey

logger = get_logger("cycleshift.validator")


# (cleared message, not-cleared message) per key; {total} and {count} are filled in
MESSAGES: dict[ValidationKey, tuple[str, str]] = {
    ValidationKey.POINTS_CLEARED: (
        "Todos os pontos foram limpos ({total} jogadores verificados)",
        "{count} jogadores ainda têm pontos",
    ),
    ValidationKey.LOCKED_POINTS_CLEARED: (
        "Todos os pontos bloqueados foram limpos ({total} jogadores verificados)",
        "{count} jogadores ainda têm pontos bloqueados",
    ),
    ValidationKey.CHALLENGE_PROGRESS_CLEARED: (
        "Todo o progresso de desafios foi limpo ({total} jogadores verificados)",
        "{count} jogadores ainda têm progresso de desafios",
    ),
    ValidationKey.VIRTUAL_GOODS_CLEARED: (
        "Todos os itens virtuais foram limpos corretamente ({total} jogadores verificados)",
        "{count} jogadores têm itens incorretos",
    ),
}


class StepValidator:
    """
    Runs the clearance check selected by a validation key.

    validate() never raises: unknown keys and failing checks both come
    back as an unsuccessful ValidationResult.
    """

    def __init__(self, job_runner: JobRunner):
        """
        Initialize the validator.

        Args:
            job_runner: Source of the clearance checks
        """
        self.job_runner = job_runner
        self._checks: dict[ValidationKey, Callable[[], Awaitable[ClearanceReport]]] = {
            ValidationKey.POINTS_CLEARED: job_runner.check_points_cleared,
            ValidationKey.LOCKED_POINTS_CLEARED: job_runner.check_locked_points_cleared,
            ValidationKey.CHALLENGE_PROGRESS_CLEARED: job_runner.check_challenge_progress_cleared,
            ValidationKey.VIRTUAL_GOODS_CLEARED: job_runner.check_virtual_goods_cleared,
        }

    async def validate(self, validation_key: str) -> ValidationResult:
        """
        Check whether the side effects behind a key are visible on every player.

        Args:
            validation_key: One of the ValidationKey values

        Returns:
            Verdict with a human-readable message and the raw report as details
        """
        try:
            key = self._resolve(validation_key)
            report = await self._checks[key]()
        except ValidationError as e:
            return ValidationResult(success=False, message=e.message)
        except Exception as e:
            logger.warning(f"Validation {validation_key} raised: {e}")
            return ValidationResult(
                success=False,
                message=f"Erro na validação: {str(e) or type(e).__name__}",
                details={"error": str(e), "error_type": type(e).__name__},
            )

        cleared_message, pending_message = MESSAGES[key]
        if report.all_cleared:
            message = cleared_message.format(total=report.total_players_checked)
        else:
            message = pending_message.format(count=len(report.offenders))

        return ValidationResult(
            success=report.all_cleared,
            message=message,
            details=report.model_dump(),
        )

    @staticmethod
    def _resolve(validation_key: str) -> ValidationKey:
        try:
            return ValidationKey(validation_key)
        except ValueError:
            raise ValidationError(
                validation_key, f"Tipo de validação desconhecido: {validation_key}"
            ) from None
