"""
Commission Aggregator

Builds the monthly commission report from closed proposals.
Nothing is stored: the report is recomputed from proposals on every read.
"""

from datetime import datetime
from decimal import Decimal

from ..models import CommissionReport, MonthlyCommission, Proposal
from .fees import percent_of

MONTH_NAMES = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]


def month_name(month_number: int) -> str:
    return MONTH_NAMES[month_number - 1]


class CommissionAggregator:
    """Groups closed proposals by calendar month and applies a commission rate."""

    DEFAULT_RATE = Decimal("5")

    def __init__(self, rate: Decimal | None = None):
        self.rate = self.DEFAULT_RATE if rate is None else rate

    def commission_for(self, proposal_value: Decimal) -> Decimal:
        return percent_of(proposal_value, self.rate)

    def aggregate(
        self,
        proposals: list[Proposal],
        year: int | None = None,
        month: int | None = None,
        now: datetime | None = None,
    ) -> CommissionReport:
        """
        Build the commission report.

        `year` and `month` only narrow the months listed; the overall totals
        always cover every closed proposal.
        """
        now = now or datetime.now()
        closed = [p for p in proposals if p.status == "fechado" and p.date is not None]

        months = self.group_by_month(closed)

        start_of_month = datetime(now.year, now.month, 1)
        current_month = [p for p in closed if start_of_month <= p.date <= now]

        return CommissionReport(
            rate=self.rate,
            months=self.filter_months(months, year, month),
            total_contracts=len(closed),
            total_honorarios=sum((p.proposal_value for p in closed), Decimal("0")),
            total_commissions=sum(
                (self.commission_for(p.proposal_value) for p in closed), Decimal("0")
            ),
            current_month_commission=sum(
                (self.commission_for(p.proposal_value) for p in current_month), Decimal("0")
            ),
            available_years=sorted({m.year for m in months}, reverse=True),
            available_months=sorted(
                {m.month_number for m in months if year is None or m.year == year}
            ),
        )

    def group_by_month(self, closed: list[Proposal]) -> list[MonthlyCommission]:
        """Group by (year, month); newest year first, calendar order within a year."""
        groups: dict[tuple[int, int], MonthlyCommission] = {}

        for proposal in closed:
            key = (proposal.date.year, proposal.date.month)
            group = groups.get(key)
            if group is None:
                group = MonthlyCommission(
                    month=month_name(proposal.date.month),
                    month_number=proposal.date.month,
                    year=proposal.date.year,
                )
                groups[key] = group

            group.total_contracts += 1
            group.total_honorarios += proposal.proposal_value
            group.total_commission += self.commission_for(proposal.proposal_value)
            group.contracts.append(proposal)

        return sorted(groups.values(), key=lambda g: (-g.year, g.month_number))

    @staticmethod
    def filter_months(
        months: list[MonthlyCommission], year: int | None, month: int | None
    ) -> list[MonthlyCommission]:
        return [
            m
            for m in months
            if (year is None or m.year == year) and (month is None or m.month_number == month)
        ]
