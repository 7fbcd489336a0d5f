"""
Output Builder

Constructs the API responses from engine results.
"""

from decimal import Decimal

from .calculators.fees import quantize_money
from .models import (
    CalculationResult,
    CommissionReport,
    FeeResults,
    KpiReport,
    Lead,
    MonthlyCommission,
    PaymentPlan,
    Proposal,
)


def to_money(value: Decimal | None) -> float | None:
    """Convert Decimal to float with 2 decimal places."""
    if value is None:
        return None
    return float(quantize_money(value))


def _fmt(value) -> str:
    """Format a number as a pt-BR currency string for descriptions."""
    text = f"{float(value):,.2f}"
    return "R$ " + text.replace(",", "X").replace(".", ",").replace("X", ".")


def _pct(value: Decimal) -> str:
    return f"{value.normalize():f}%"


def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


class OutputBuilder:
    """Builds the JSON-ready dictionaries returned by the API."""

    def build_calculation(self, result: CalculationResult) -> dict:
        """Calculator response: every variant plus its payment plan."""
        if result.fees is None:
            return {"results": None, "paymentPlans": {}}

        return {
            "results": self.build_fees(result.fees, result.input.debt_value),
            "paymentPlans": {
                name: self.build_payment_plan(plan) for name, plan in result.payment_plans.items()
            },
        }

    def build_fees(self, fees: FeeResults, debt: Decimal) -> dict:
        honorario = fees.honorario
        outras = fees.outras_acoes
        consignado = fees.consignado

        output = {
            "honorario": {
                "percentual": float(honorario.percentual),
                "valor": to_money(honorario.valor),
                "minimo": to_money(honorario.minimo),
                "economiaMin": to_money(honorario.economia_min),
                "economiaMax": to_money(honorario.economia_max),
                "description": (
                    f"max({_pct(honorario.percentual)} × {_fmt(debt)}, mínimo {_fmt(honorario.minimo)})"
                    f" = {_fmt(honorario.valor)}"
                ),
            },
            "outrasAcoes": {
                "percentual": float(outras.percentual),
                "valor": to_money(outras.valor),
                "minimo": to_money(outras.minimo),
                "economiaMin": to_money(outras.economia_min),
                "economiaMax": to_money(outras.economia_max),
                "indenizacao": to_money(outras.indenizacao),
                "description": (
                    f"max({_pct(outras.percentual)} × {_fmt(debt)}, mínimo {_fmt(outras.minimo)})"
                    f" = {_fmt(outras.valor)}"
                ),
            },
            "consignado": {
                "percentual": float(consignado.percentual),
                "economia": to_money(consignado.economia),
                "description": f"{_pct(consignado.percentual)} da economia obtida = {_fmt(consignado.economia)}",
            },
            "clausulaTeto": None,
        }

        if fees.clausula_teto is not None:
            teto = fees.clausula_teto
            output["clausulaTeto"] = {
                "percentual": float(teto.percentual),
                "valor": to_money(teto.valor),
                "description": (
                    f"{_pct(teto.percentual)} × {_fmt(debt)} = {_fmt(teto.valor)}"
                    " (usar apenas se o cliente insistir)"
                ),
            }

        return output

    def build_payment_plan(self, plan: PaymentPlan) -> dict:
        return {
            "valor": to_money(plan.value),
            "parcelas": plan.installments,
            "cartaoParcela": to_money(plan.cartao_parcela),
            "boletoEntrada": to_money(plan.boleto_entrada),
            "boletoRestante": to_money(plan.boleto_restante),
            "boletoParcela": to_money(plan.boleto_parcela),
        }

    def build_proposal(self, proposal: Proposal) -> dict:
        return {
            "id": proposal.id,
            "clientName": proposal.client_name,
            "clientPhone": proposal.client_phone,
            "clientDocument": proposal.client_document,
            "debtValue": to_money(proposal.debt_value),
            "economiaValue": to_money(proposal.economia_value),
            "indenizacaoValue": to_money(proposal.indenizacao_value),
            "proposalType": proposal.proposal_type,
            "proposalValue": to_money(proposal.proposal_value),
            "status": proposal.status,
            "notes": proposal.notes,
            "date": _iso(proposal.date),
            "userId": proposal.user_id,
        }

    def build_lead(self, lead: Lead) -> dict:
        return {
            "id": lead.id,
            "clientName": lead.client_name,
            "clientPhone": lead.client_phone,
            "clientDocument": lead.client_document,
            "clientEmail": lead.client_email,
            "bankName": lead.bank_name,
            "debtValue": to_money(lead.debt_value),
            "currentSituation": lead.current_situation,
            "origem": lead.origem,
            "status": lead.status,
            "meetingDate": _iso(lead.meeting_date),
            "notes": lead.notes,
            "createdAt": _iso(lead.created_at),
            "updatedAt": _iso(lead.updated_at),
            "proposalValue": to_money(lead.proposal_value),
            "proposalType": lead.proposal_type,
        }

    def build_lead_stats(self, stats: dict) -> dict:
        return {**stats, "ticketMedio": to_money(stats["ticketMedio"])}

    def build_commission_report(self, report: CommissionReport) -> dict:
        return {
            "commissionRate": float(report.rate),
            "months": [self._build_month(month) for month in report.months],
            "totals": {
                "totalContracts": report.total_contracts,
                "totalHonorarios": to_money(report.total_honorarios),
                "totalCommissions": to_money(report.total_commissions),
                "currentMonthCommission": to_money(report.current_month_commission),
            },
            "availableYears": report.available_years,
            "availableMonths": report.available_months,
        }

    def _build_month(self, month: MonthlyCommission) -> dict:
        return {
            "month": month.month,
            "monthNumber": month.month_number,
            "year": month.year,
            "totalContracts": month.total_contracts,
            "totalHonorarios": to_money(month.total_honorarios),
            "totalCommission": to_money(month.total_commission),
            "contracts": [self.build_proposal(p) for p in month.contracts],
        }

    def build_kpi_report(self, report: KpiReport) -> dict:
        return {
            "period": report.period_days,
            "kpis": {
                "totalLeads": report.total_leads,
                "leadsNovos": report.leads_novos,
                "reunioesAgendadas": report.reunioes_agendadas,
                "propostasEnviadas": report.propostas_enviadas,
                "contratosAssinados": report.contratos_assinados,
                "contratosRecusados": report.contratos_recusados,
                "leadsPerdidos": report.leads_perdidos,
                "taxaConversaoReuniao": report.taxa_conversao_reuniao,
                "taxaFechamento": report.taxa_fechamento,
                "receitaGerada": to_money(report.receita_gerada),
                "ticketMedio": to_money(report.ticket_medio),
                "comissaoGerada": to_money(report.comissao_gerada),
            },
            "statusDistribution": report.status_distribution,
            "origemDistribution": report.origem_distribution,
            "topBancos": report.top_bancos,
            "evolucaoMensal": [
                {
                    "month": point.month,
                    "year": point.year,
                    "monthNumber": point.month_number,
                    "leads": point.leads,
                    "fechamentos": point.fechamentos,
                }
                for point in report.evolucao_mensal
            ],
        }
