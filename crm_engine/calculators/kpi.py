"""
KPI / Funnel Aggregator

Dashboard numbers for the sales funnel over a rolling window.
"""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ..models import KpiReport, Lead, MonthlyEvolution, Proposal
from .fees import percent_of

MONTH_ABBREVIATIONS = [
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
]


def format_rate(numerator: int, denominator: int) -> str:
    """Percentage with one decimal place; "0" when there is nothing to divide by."""
    if denominator <= 0:
        return "0"
    rate = Decimal(numerator) / Decimal(denominator) * Decimal("100")
    return str(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def count_ranked(values: list[str]) -> list[dict]:
    """Frequency table in first-seen order."""
    counts: dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return [{"name": name, "value": count} for name, count in counts.items()]


class KpiAggregator:
    """Computes funnel counts, conversion rates and revenue for a period."""

    PERIODS = (7, 30, 90, 365)
    DEFAULT_PERIOD = 30
    COMMISSION_RATE = Decimal("5")
    TOP_BANKS = 10
    TRAILING_MONTHS = 6

    def __init__(self, commission_rate: Decimal | None = None):
        self.commission_rate = self.COMMISSION_RATE if commission_rate is None else commission_rate

    def aggregate(
        self,
        leads: list[Lead],
        proposals: list[Proposal],
        period_days: int = DEFAULT_PERIOD,
        now: datetime | None = None,
    ) -> KpiReport:
        if period_days not in self.PERIODS:
            raise ValueError(f"Invalid period: {period_days}. Must be one of {list(self.PERIODS)}")

        now = now or datetime.now()
        cutoff = now - timedelta(days=period_days)

        window_leads = [
            lead for lead in leads if lead.created_at is not None and lead.created_at >= cutoff
        ]
        window_proposals = [p for p in proposals if p.date is not None and p.date >= cutoff]

        def leads_with(status: str) -> int:
            return sum(1 for lead in window_leads if lead.status == status)

        closed = [p for p in window_proposals if p.status == "fechado"]
        recusados = sum(1 for p in window_proposals if p.status == "recusado")

        total_leads = len(window_leads)
        novos = leads_with("novo")
        em_reuniao = leads_with("em_reuniao")
        enviadas = leads_with("proposta_enviada")
        perdidos = leads_with("perdido")

        receita = sum((p.proposal_value for p in closed), Decimal("0"))
        ticket_medio = receita / len(closed) if closed else Decimal("0")

        return KpiReport(
            period_days=period_days,
            total_leads=total_leads,
            leads_novos=novos,
            reunioes_agendadas=em_reuniao,
            propostas_enviadas=enviadas,
            contratos_assinados=len(closed),
            contratos_recusados=recusados,
            leads_perdidos=perdidos,
            taxa_conversao_reuniao=format_rate(em_reuniao, total_leads),
            # Closed proposals over leads: the two collections are compared on purpose
            taxa_fechamento=format_rate(len(closed), total_leads),
            receita_gerada=receita,
            ticket_medio=ticket_medio,
            comissao_gerada=percent_of(receita, self.commission_rate),
            status_distribution=[
                {"name": "Novos", "value": novos},
                {"name": "Em Reunião", "value": em_reuniao},
                {"name": "Proposta Enviada", "value": enviadas},
                {"name": "Fechados", "value": len(closed)},
                {"name": "Perdidos", "value": perdidos},
            ],
            origem_distribution=count_ranked([lead.origem or "Não informado" for lead in window_leads]),
            top_bancos=self.top_banks(window_leads),
            evolucao_mensal=self.monthly_evolution(leads, proposals, now),
        )

    def top_banks(self, leads: list[Lead]) -> list[dict]:
        ranked = count_ranked([lead.bank_name for lead in leads])
        # sorted() is stable, so ties keep first-seen order
        return sorted(ranked, key=lambda item: -item["value"])[: self.TOP_BANKS]

    def monthly_evolution(
        self, leads: list[Lead], proposals: list[Proposal], now: datetime
    ) -> list[MonthlyEvolution]:
        """Leads created and contracts closed per month, oldest first."""
        series = []
        for offset in range(self.TRAILING_MONTHS - 1, -1, -1):
            year, month = shift_month(now.year, now.month, -offset)
            series.append(
                MonthlyEvolution(
                    month=f"{MONTH_ABBREVIATIONS[month - 1]}/{year % 100:02d}",
                    year=year,
                    month_number=month,
                    leads=sum(
                        1
                        for lead in leads
                        if lead.created_at is not None
                        and (lead.created_at.year, lead.created_at.month) == (year, month)
                    ),
                    fechamentos=sum(
                        1
                        for p in proposals
                        if p.status == "fechado"
                        and p.date is not None
                        and (p.date.year, p.date.month) == (year, month)
                    ),
                )
            )
        return series
