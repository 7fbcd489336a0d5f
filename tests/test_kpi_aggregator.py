"""
Unit Tests for KPI / Funnel Aggregator
"""

from datetime import datetime
from decimal import Decimal

import pytest

from crm_engine.calculators.kpi import KpiAggregator, count_ranked, format_rate, shift_month
from crm_engine.models import Lead, Proposal

NOW = datetime(2025, 6, 30, 12, 0, 0)


def make_lead(status, created_at, bank="Itaú", origem="WhatsApp", lead_id="l"):
    return Lead(
        id=lead_id,
        client_name="Cliente",
        client_phone="11999999999",
        client_document="12345678900",
        bank_name=bank,
        debt_value=Decimal("50000"),
        origem=origem,
        status=status,
        created_at=created_at,
    )


def make_proposal(value, status, date):
    return Proposal(
        id="p",
        client_name="Cliente",
        client_phone="11999999999",
        client_document="12345678900",
        debt_value=Decimal("100000"),
        economia_value=Decimal("0"),
        indenizacao_value=Decimal("0"),
        proposal_type="honorario",
        proposal_value=Decimal(str(value)),
        status=status,
        date=date,
    )


@pytest.fixture
def leads():
    return [
        make_lead("novo", datetime(2025, 6, 2), bank="Itaú", origem="WhatsApp"),
        make_lead("em_reuniao", datetime(2025, 6, 10), bank="Bradesco", origem="Instagram"),
        make_lead("perdido", datetime(2025, 6, 12), bank="Itaú", origem=""),
        make_lead("proposta_enviada", datetime(2025, 6, 20), bank="Santander", origem="WhatsApp"),
        make_lead("novo", datetime(2025, 1, 1), bank="Caixa", origem="Google"),
    ]


@pytest.fixture
def proposals():
    return [
        make_proposal(3000, "fechado", datetime(2025, 6, 5)),
        make_proposal(5000, "fechado", datetime(2025, 6, 25)),
        make_proposal(4000, "recusado", datetime(2025, 6, 8)),
        make_proposal(6000, "pendente", datetime(2025, 6, 9)),
        make_proposal(7000, "fechado", datetime(2025, 1, 15)),
    ]


class TestFormatRate:

    def test_one_decimal_place(self):
        assert format_rate(1, 4) == "25.0"

    def test_rounds_half_up(self):
        assert format_rate(2, 3) == "66.7"

    def test_zero_denominator(self):
        assert format_rate(0, 0) == "0"
        assert format_rate(3, 0) == "0"


class TestHelpers:

    def test_shift_month_wraps_year(self):
        assert shift_month(2025, 2, -5) == (2024, 9)
        assert shift_month(2024, 12, 1) == (2025, 1)

    def test_count_ranked_first_seen_order(self):
        assert count_ranked(["B", "A", "B"]) == [
            {"name": "B", "value": 2},
            {"name": "A", "value": 1},
        ]


class TestFunnel:

    @pytest.fixture
    def aggregator(self):
        return KpiAggregator()

    def test_counts_within_30_days(self, aggregator, leads, proposals):
        report = aggregator.aggregate(leads, proposals, 30, now=NOW)

        assert report.period_days == 30
        assert report.total_leads == 4
        assert report.leads_novos == 1
        assert report.reunioes_agendadas == 1
        assert report.propostas_enviadas == 1
        assert report.leads_perdidos == 1
        assert report.contratos_assinados == 2
        assert report.contratos_recusados == 1

    def test_rates(self, aggregator, leads, proposals):
        report = aggregator.aggregate(leads, proposals, 30, now=NOW)

        assert report.taxa_conversao_reuniao == "25.0"
        assert report.taxa_fechamento == "50.0"

    def test_revenue_ticket_and_commission(self, aggregator, leads, proposals):
        """Closed 3.000 + 5.000 -> revenue 8.000, ticket 4.000, 5% commission 400"""
        report = aggregator.aggregate(leads, proposals, 30, now=NOW)

        assert report.receita_gerada == Decimal("8000")
        assert report.ticket_medio == Decimal("4000")
        assert report.comissao_gerada == Decimal("400")

    def test_commission_rate_override(self, leads, proposals):
        report = KpiAggregator(Decimal("10")).aggregate(leads, proposals, 30, now=NOW)
        assert report.comissao_gerada == Decimal("800")

    def test_year_window_includes_old_records(self, aggregator, leads, proposals):
        report = aggregator.aggregate(leads, proposals, 365, now=NOW)

        assert report.total_leads == 5
        assert report.contratos_assinados == 3
        assert report.receita_gerada == Decimal("15000")

    def test_empty_collections(self, aggregator):
        report = aggregator.aggregate([], [], 30, now=NOW)

        assert report.total_leads == 0
        assert report.taxa_conversao_reuniao == "0"
        assert report.taxa_fechamento == "0"
        assert report.receita_gerada == Decimal("0")
        assert report.ticket_medio == Decimal("0")
        assert report.comissao_gerada == Decimal("0")

    def test_invalid_period(self, aggregator):
        with pytest.raises(ValueError, match="Invalid period"):
            aggregator.aggregate([], [], 15, now=NOW)

    def test_status_distribution(self, aggregator, leads, proposals):
        report = aggregator.aggregate(leads, proposals, 30, now=NOW)

        assert report.status_distribution == [
            {"name": "Novos", "value": 1},
            {"name": "Em Reunião", "value": 1},
            {"name": "Proposta Enviada", "value": 1},
            {"name": "Fechados", "value": 2},
            {"name": "Perdidos", "value": 1},
        ]


class TestDistributions:

    def test_missing_origin_is_not_informed(self, leads, proposals):
        report = KpiAggregator().aggregate(leads, proposals, 30, now=NOW)

        assert report.origem_distribution == [
            {"name": "WhatsApp", "value": 2},
            {"name": "Instagram", "value": 1},
            {"name": "Não informado", "value": 1},
        ]

    def test_top_banks_sorted_with_stable_ties(self, leads, proposals):
        report = KpiAggregator().aggregate(leads, proposals, 30, now=NOW)

        assert report.top_bancos == [
            {"name": "Itaú", "value": 2},
            {"name": "Bradesco", "value": 1},
            {"name": "Santander", "value": 1},
        ]

    def test_top_banks_capped_at_ten(self):
        leads = [
            make_lead("novo", datetime(2025, 6, 1), bank=f"Banco {i}")
            for i in range(12)
        ]
        assert len(KpiAggregator().top_banks(leads)) == 10


class TestMonthlyEvolution:

    def test_six_months_oldest_first(self, leads, proposals):
        report = KpiAggregator().aggregate(leads, proposals, 30, now=NOW)
        series = report.evolucao_mensal

        assert [m.month for m in series] == [
            "Jan/25", "Fev/25", "Mar/25", "Abr/25", "Mai/25", "Jun/25",
        ]
        # Series ignores the period window
        assert (series[0].leads, series[0].fechamentos) == (1, 1)
        assert (series[-1].leads, series[-1].fechamentos) == (4, 2)
        assert all(m.leads == 0 for m in series[1:5])

    def test_series_wraps_across_years(self):
        series = KpiAggregator().monthly_evolution([], [], datetime(2025, 2, 10))

        assert [m.month for m in series] == [
            "Set/24", "Out/24", "Nov/24", "Dez/24", "Jan/25", "Fev/25",
        ]
        assert (series[0].year, series[0].month_number) == (2024, 9)
