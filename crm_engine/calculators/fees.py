"""
Fee Calculator for the CRM Engine

Computes the proposal variants offered to a client from the debt, the
savings obtained ("economia") and the indemnity amount.
All use Decimal; rounding only happens when values leave the engine.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..models import (
    CalculationInput,
    ClausulaTetoResult,
    ConsignadoResult,
    FeeResults,
    HonorarioResult,
    OutrasAcoesResult,
    PercentageConfig,
)

HUNDRED = Decimal("100")


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using ROUND_HALF_UP."""
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    """Apply a percentage expressed in percent units (5 == 5%)."""
    return amount * percent / HUNDRED


class FeeCalculator:
    """Calculates honorario, outras ações, consignado and cap-clause fees."""

    def calculate(
        self,
        debt: Decimal,
        economia: Decimal,
        indenizacao: Decimal,
        config: PercentageConfig | None = None,
        include_clausula_teto: bool = False,
    ) -> FeeResults | None:
        """
        Calculate every proposal variant.

        Returns None while the debt is zero or negative: there is nothing to
        propose yet, which is different from a zero fee.
        """
        if debt <= 0:
            return None

        config = config or PercentageConfig.defaults()

        return FeeResults(
            honorario=self._calculate_honorario(debt, economia, config),
            outras_acoes=self._calculate_outras_acoes(debt, economia, indenizacao, config),
            consignado=self._calculate_consignado(economia, config),
            clausula_teto=(
                self._calculate_clausula_teto(debt, config) if include_clausula_teto else None
            ),
        )

    def calculate_input(self, calc_input: CalculationInput) -> FeeResults | None:
        return self.calculate(
            calc_input.debt_value,
            calc_input.economia_value,
            calc_input.indenizacao_value,
            calc_input.percentages,
            calc_input.include_clausula_teto,
        )

    def _calculate_honorario(
        self, debt: Decimal, economia: Decimal, config: PercentageConfig
    ) -> HonorarioResult:
        """Honorario: percent of the debt, never below the minimum."""
        return HonorarioResult(
            percentual=config.honorario_percent,
            valor=max(percent_of(debt, config.honorario_percent), config.honorario_minimo),
            minimo=config.honorario_minimo,
            economia_min=percent_of(economia, config.economia_min_percent),
            economia_max=percent_of(economia, config.economia_max_percent),
        )

    def _calculate_outras_acoes(
        self,
        debt: Decimal,
        economia: Decimal,
        indenizacao: Decimal,
        config: PercentageConfig,
    ) -> OutrasAcoesResult:
        """Other actions: same shape as honorario plus a share of the indemnity."""
        return OutrasAcoesResult(
            percentual=config.outras_acoes_percent,
            valor=max(percent_of(debt, config.outras_acoes_percent), config.outras_acoes_minimo),
            minimo=config.outras_acoes_minimo,
            economia_min=percent_of(economia, config.economia_min_percent),
            economia_max=percent_of(economia, config.economia_max_percent),
            indenizacao=percent_of(indenizacao, config.indenizacao_percent),
        )

    def _calculate_consignado(self, economia: Decimal, config: PercentageConfig) -> ConsignadoResult:
        """Payroll-deduction debts: share of the savings."""
        return ConsignadoResult(
            percentual=config.consignado_percent,
            economia=percent_of(economia, config.consignado_percent),
        )

    def _calculate_clausula_teto(self, debt: Decimal, config: PercentageConfig) -> ClausulaTetoResult:
        """Cap clause: only offered when the client insists."""
        return ClausulaTetoResult(
            percentual=config.clausula_teto_percent,
            valor=percent_of(debt, config.clausula_teto_percent),
        )

    @staticmethod
    def proposal_value_for(results: FeeResults, proposal_type: str) -> Decimal:
        """The fee a proposal of the given type is saved with."""
        if proposal_type == "honorario":
            return results.honorario.valor
        if proposal_type == "outrasAcoes":
            return results.outras_acoes.valor
        if proposal_type == "consignado":
            return results.consignado.economia
        raise ValueError(f"Invalid proposalType: {proposal_type}")
