"""
Payment Plan Generator

Splits a proposal value into card and bank-slip installments.
"""

from decimal import Decimal

from ..models import PaymentPlan


class PaymentPlanGenerator:
    """Derives installment schedules for a proposal value."""

    INSTALLMENTS = 10
    BOLETO_ENTRADA_RATE = Decimal("0.3")
    BOLETO_RESTANTE_RATE = Decimal("0.7")
    BOLETO_MINIMO = Decimal("300")

    def generate(self, value: Decimal) -> PaymentPlan:
        """
        Build both payment options.

        Card:   10 × (value / 10), no minimum.
        Boleto: 30% down payment, then 10 installments of the remaining 70%,
                each at least R$ 300,00.
        """
        if value < 0:
            raise ValueError(f"proposal value cannot be negative, got: {value}")

        restante = value * self.BOLETO_RESTANTE_RATE

        return PaymentPlan(
            value=value,
            installments=self.INSTALLMENTS,
            cartao_parcela=value / self.INSTALLMENTS,
            boleto_entrada=value * self.BOLETO_ENTRADA_RATE,
            boleto_restante=restante,
            boleto_parcela=max(restante / self.INSTALLMENTS, self.BOLETO_MINIMO),
        )
