"""
Calculators Package

Provides all calculation and aggregation components of the CRM engine.
"""

from .commission import CommissionAggregator
from .fees import FeeCalculator
from .kpi import KpiAggregator
from .payment_plan import PaymentPlanGenerator

__all__ = [
    "FeeCalculator",
    "PaymentPlanGenerator",
    "CommissionAggregator",
    "KpiAggregator",
]
