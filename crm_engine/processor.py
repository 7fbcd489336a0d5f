"""
CRM Processor - Main Orchestrator

Coordinates calculator runs, proposal building and report generation
through discrete, testable steps.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List

from . import config
from .calculators import CommissionAggregator, FeeCalculator, KpiAggregator, PaymentPlanGenerator
from .models import CalculationInput, CalculationResult, Lead, Proposal
from .output import OutputBuilder
from .parsing import parse_percent, parse_value
from .validators import InputValidator

logger = logging.getLogger(__name__)


def _parse_filter(value) -> int | None:
    """Year/month filters: None, "" and "all" mean no filter."""
    if value is None or value == "" or value == "all":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid filter value: {value}")


class CrmProcessor:
    """
    Main orchestrator for the calculator and the reports.

    Calculator pipeline:
    1. Parse Input
    2. Calculate Fees
    3. Generate Payment Plans
    4. Build Output
    """

    def __init__(
        self,
        commission_rate: Decimal = config.DEFAULT_COMMISSION_RATE,
        kpi_commission_rate: Decimal = config.KPI_COMMISSION_RATE,
    ):
        self.validator = InputValidator()
        self.fee_calculator = FeeCalculator()
        self.payment_plan_generator = PaymentPlanGenerator()
        self.kpi_aggregator = KpiAggregator(kpi_commission_rate)
        self.output_builder = OutputBuilder()
        self.commission_rate = commission_rate

    def process(self, calc_input: CalculationInput) -> CalculationResult:
        """
        Run the calculator.

        Args:
            calc_input: Parsed CalculationInput object

        Returns:
            CalculationResult; `fees` is None while the debt is not positive
        """
        # Step 1: Calculate fees (honorario, outras ações, consignado, teto)
        fees = self.fee_calculator.calculate_input(calc_input)
        if fees is None:
            return CalculationResult(input=calc_input, fees=None)

        # Step 2: Payment plans for every variant on offer
        plans = {
            "honorario": self.payment_plan_generator.generate(fees.honorario.valor),
            "outrasAcoes": self.payment_plan_generator.generate(fees.outras_acoes.valor),
            "consignado": self.payment_plan_generator.generate(fees.consignado.economia),
        }
        if fees.clausula_teto is not None:
            plans["clausulaTeto"] = self.payment_plan_generator.generate(fees.clausula_teto.valor)

        return CalculationResult(input=calc_input, fees=fees, payment_plans=plans)

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run the calculator from raw dictionary input.

        Convenience method for API usage.
        """
        result = self.process(CalculationInput.from_dict(data))
        return self.output_builder.build_calculation(result)

    def payment_plan_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ValueError("Payment plan input must be a JSON object")
        value = parse_value(data.get("value"))
        plan = self.payment_plan_generator.generate(value)
        return self.output_builder.build_payment_plan(plan)

    def build_proposal(self, data: Dict[str, Any], user_id: str | None = None) -> Proposal:
        """
        Turn a save request into a validated Proposal.

        When the request carries no proposalValue, the value is taken from a
        calculator run with the submitted figures and percentages.
        """
        proposal = Proposal.from_dict({**data, "id": ""})
        proposal.user_id = user_id
        proposal.date = None

        if data.get("proposalValue") in (None, ""):
            self.validator.validate_proposal_type(proposal.proposal_type)
            fees = self.fee_calculator.calculate_input(CalculationInput.from_dict(data))
            if fees is None:
                raise ValueError("debtValue must be positive to calculate the proposal value")
            proposal.proposal_value = self.fee_calculator.proposal_value_for(fees, proposal.proposal_type)

        self.validator.validate_proposal(proposal)
        return proposal

    def build_lead(self, data: Dict[str, Any]) -> Lead:
        lead = Lead.from_dict({**data, "id": "", "status": "novo"})
        self.validator.validate_lead(lead)
        return lead

    def commission_report(
        self,
        proposals: List[Proposal],
        rate=None,
        year=None,
        month=None,
        now: datetime | None = None,
    ) -> Dict[str, Any]:
        """Monthly commission panel; `rate` falls back to the configured default."""
        aggregator = CommissionAggregator(parse_percent(rate, self.commission_rate))
        parsed_month = _parse_filter(month)
        if parsed_month is not None and not 1 <= parsed_month <= 12:
            raise ValueError(f"Invalid month: {parsed_month}")

        report = aggregator.aggregate(proposals, _parse_filter(year), parsed_month, now)
        return self.output_builder.build_commission_report(report)

    def kpi_report(
        self,
        leads: List[Lead],
        proposals: List[Proposal],
        period=KpiAggregator.DEFAULT_PERIOD,
        now: datetime | None = None,
    ) -> Dict[str, Any]:
        try:
            period_days = int(period)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid period: {period}")

        report = self.kpi_aggregator.aggregate(leads, proposals, period_days, now)
        return self.output_builder.build_kpi_report(report)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Run the calculator from a Python dict and return a Python dict.
    """
    processor = CrmProcessor()
    return processor.process_from_dict(input_data)


def calculate_from_json(json_input: str) -> str:
    """
    Run the calculator from a JSON string and return a JSON string.
    """
    try:
        input_data = json.loads(json_input)
        processor = CrmProcessor()
        result = processor.process_from_dict(input_data)
        return json.dumps(result, indent=2)

    except ValueError as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except Exception as e:
        logger.error(f"Calculation error: {str(e)}", exc_info=True)
        error_response = {"error": str(e), "status": "failed"}
        return json.dumps(error_response, indent=2)
