"""
Tests for the step validator.
"""

import pytest

from cycleshift.core.validator import StepValidator


class TestValidate:
    """Tests for mapping validation keys to checks."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key,message",
        [
            ("points_cleared", "Todos os pontos foram limpos (10 jogadores verificados)"),
            ("locked_points_cleared", "Todos os pontos bloqueados foram limpos (10 jogadores verificados)"),
            ("challenge_progress_cleared", "Todo o progresso de desafios foi limpo (1 jogadores verificados)"),
            (
                "virtual_goods_cleared",
                "Todos os itens virtuais foram limpos corretamente (10 jogadores verificados)",
            ),
        ],
    )
    async def test_cleared(self, job_runner, key, message):
        validator = StepValidator(job_runner)

        result = await validator.validate(key)

        assert result.success is True
        assert result.message == message
        assert job_runner.calls == [f"check:{key}"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key,message",
        [
            ("points_cleared", "3 jogadores ainda têm pontos"),
            ("locked_points_cleared", "3 jogadores ainda têm pontos bloqueados"),
            ("challenge_progress_cleared", "3 jogadores ainda têm progresso de desafios"),
            ("virtual_goods_cleared", "3 jogadores têm itens incorretos"),
        ],
    )
    async def test_not_cleared(self, job_runner, key, message):
        job_runner.offenders[key] = [["p1", "p2", "p3"]]
        validator = StepValidator(job_runner)

        result = await validator.validate(key)

        assert result.success is False
        assert result.message == message

    @pytest.mark.asyncio
    async def test_details_carry_report(self, job_runner):
        job_runner.offenders["points_cleared"] = [["p9"]]
        validator = StepValidator(job_runner)

        result = await validator.validate("points_cleared")

        assert result.details == {
            "all_cleared": False,
            "total_players_checked": 10,
            "players_with_points": ["p9"],
        }

    @pytest.mark.asyncio
    async def test_unknown_key(self, job_runner):
        validator = StepValidator(job_runner)

        result = await validator.validate("karma_cleared")

        assert result.success is False
        assert result.message == "Tipo de validação desconhecido: karma_cleared"
        assert job_runner.calls == []

    @pytest.mark.asyncio
    async def test_check_error_is_contained(self, job_runner):
        job_runner.check_errors["virtual_goods_cleared"] = RuntimeError("timeout")
        validator = StepValidator(job_runner)

        result = await validator.validate("virtual_goods_cleared")

        assert result.success is False
        assert result.message == "Erro na validação: timeout"
        assert result.details == {"error": "timeout", "error_type": "RuntimeError"}
