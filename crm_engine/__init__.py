"""
DEBT-RENEGOTIATION CRM ENGINE
Fee calculator, proposal history, commission and KPI reports
"""

from .models import CalculationInput, CalculationResult, Lead, PercentageConfig, Proposal
from .processor import CrmProcessor
from .store import CrmStore, NotFoundError

__all__ = [
    'CrmProcessor',
    'CrmStore',
    'NotFoundError',
    'CalculationInput',
    'CalculationResult',
    'PercentageConfig',
    'Proposal',
    'Lead',
]
