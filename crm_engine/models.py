"""
Domain Models for the Debt-Renegotiation CRM Engine

These dataclasses provide type-safe representations of all business entities.
All monetary values use Decimal for precision.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from .parsing import parse_percent, parse_value

# =============================================================================
# ENUMERATIONS
# =============================================================================

PROPOSAL_TYPES = ("honorario", "outrasAcoes", "consignado")
PROPOSAL_STATUSES = ("pendente", "fechado", "recusado")
LEAD_STATUSES = ("novo", "em_reuniao", "proposta_enviada", "fechado", "perdido", "recusado")
LEAD_PROPOSAL_TYPES = ("superendividamento", "outras_acoes", "consignado")

BANKS = [
    "Banco do Brasil", "Itaú", "Bradesco", "Caixa", "Santander",
    "Nubank", "Inter", "C6 Bank", "BTG Pactual", "Safra",
    "Sicoob", "Sicredi", "Creditas", "Banco Pan", "BMG",
    "Fintech/Digital", "Outros",
]

ORIGENS = [
    "Site/Landing Page", "WhatsApp", "Instagram", "Facebook",
    "Google Ads", "Indicação", "Telefone", "E-mail", "Outros",
]

SITUACOES = [
    "Cobrança judicial iniciada",
    "Busca e apreensão",
    "Execução em andamento",
    "Negativação/SPC-Serasa",
    "Ameaça de bloqueio judicial",
    "Parcelamento negado pelo banco",
    "Juros abusivos",
    "Outros",
]


OPT_IN_VALUES = ("true", "1", "on")


def parse_opt_in(value) -> bool:
    """Only an explicit true, "true", "1" or "on" switches an option on."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() in OPT_IN_VALUES


def read_text(data: dict, key: str, strip: bool = True) -> str:
    """Text field from a request; missing is "", anything but a string is rejected."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got: {type(value).__name__}")
    return value.strip() if strip else value


def parse_datetime(value) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    # Accept the trailing "Z" produced by browser ISO strings
    text = str(value).replace("Z", "+00:00")
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


# =============================================================================
# CALCULATOR INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class PercentageConfig:
    """Percentages (in percent units, 1 == 1%) and minimum fees for the calculator."""

    honorario_percent: Decimal = Decimal("1")
    honorario_minimo: Decimal = Decimal("3000")
    economia_min_percent: Decimal = Decimal("15")
    economia_max_percent: Decimal = Decimal("20")
    outras_acoes_percent: Decimal = Decimal("1")
    outras_acoes_minimo: Decimal = Decimal("1500")
    indenizacao_percent: Decimal = Decimal("30")
    consignado_percent: Decimal = Decimal("35")
    clausula_teto_percent: Decimal = Decimal("5")

    @classmethod
    def defaults(cls) -> "PercentageConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: dict | None) -> "PercentageConfig":
        """Build a config from form values; bad or missing entries keep the default."""
        data = data if isinstance(data, dict) else {}
        base = cls()

        def minimum(key: str, default: Decimal) -> Decimal:
            raw = data.get(key)
            if raw is None or raw == "":
                return default
            return parse_value(raw)

        return cls(
            honorario_percent=parse_percent(data.get("honorarioPerc"), base.honorario_percent),
            honorario_minimo=minimum("honorarioMinimo", base.honorario_minimo),
            economia_min_percent=parse_percent(data.get("economiaMinPerc"), base.economia_min_percent),
            economia_max_percent=parse_percent(data.get("economiaMaxPerc"), base.economia_max_percent),
            outras_acoes_percent=parse_percent(data.get("outrasAcoesPerc"), base.outras_acoes_percent),
            outras_acoes_minimo=minimum("outrasAcoesMinimo", base.outras_acoes_minimo),
            indenizacao_percent=parse_percent(data.get("indenizacaoPerc"), base.indenizacao_percent),
            consignado_percent=parse_percent(data.get("consignadoPerc"), base.consignado_percent),
            clausula_teto_percent=parse_percent(data.get("clausulaTetoPerc"), base.clausula_teto_percent),
        )


@dataclass
class CalculationInput:
    """Everything the calculator screen submits."""

    debt_value: Decimal
    economia_value: Decimal = Decimal("0")
    indenizacao_value: Decimal = Decimal("0")
    percentages: PercentageConfig = field(default_factory=PercentageConfig)
    include_clausula_teto: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "CalculationInput":
        if not isinstance(data, dict):
            raise ValueError("Calculator input must be a JSON object")
        return cls(
            debt_value=parse_value(data.get("debtValue")),
            economia_value=parse_value(data.get("economiaValue")),
            indenizacao_value=parse_value(data.get("indenizacaoValue")),
            percentages=PercentageConfig.from_dict(data.get("percentuais")),
            include_clausula_teto=parse_opt_in(data.get("includeClausulaTeto")),
        )


# =============================================================================
# PERSISTED ENTITIES
# =============================================================================


@dataclass
class Proposal:
    """A proposal confirmed by the closer and stored in the repository."""

    id: str
    client_name: str
    client_phone: str
    client_document: str
    debt_value: Decimal
    economia_value: Decimal
    indenizacao_value: Decimal
    proposal_type: str
    proposal_value: Decimal
    status: str = "pendente"
    notes: str = ""
    date: datetime | None = None
    user_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Proposal":
        return cls(
            id=str(data.get("id", "")),
            client_name=read_text(data, "clientName"),
            client_phone=read_text(data, "clientPhone"),
            client_document=read_text(data, "clientDocument"),
            debt_value=parse_value(data.get("debtValue")),
            economia_value=parse_value(data.get("economiaValue")),
            indenizacao_value=parse_value(data.get("indenizacaoValue")),
            proposal_type=data.get("proposalType", ""),
            proposal_value=parse_value(data.get("proposalValue")),
            status=data.get("status") or "pendente",
            notes=read_text(data, "notes", strip=False),
            date=parse_datetime(data.get("date")),
            user_id=data.get("userId"),
        )


@dataclass
class Lead:
    """A prospective client moving through the sales funnel."""

    id: str
    client_name: str
    client_phone: str
    client_document: str
    bank_name: str
    debt_value: Decimal
    client_email: str = ""
    current_situation: str = ""
    origem: str = ""
    status: str = "novo"
    meeting_date: datetime | None = None
    notes: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    proposal_value: Decimal | None = None
    proposal_type: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Lead":
        proposal_value = data.get("proposalValue")
        return cls(
            id=str(data.get("id", "")),
            client_name=read_text(data, "clientName"),
            client_phone=read_text(data, "clientPhone"),
            client_document=read_text(data, "clientDocument"),
            bank_name=read_text(data, "bankName"),
            debt_value=parse_value(data.get("debtValue")),
            client_email=read_text(data, "clientEmail", strip=False),
            current_situation=read_text(data, "currentSituation", strip=False),
            origem=read_text(data, "origem", strip=False),
            status=data.get("status") or "novo",
            meeting_date=parse_datetime(data.get("meetingDate")),
            notes=read_text(data, "notes", strip=False),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
            proposal_value=parse_value(proposal_value) if proposal_value is not None else None,
            proposal_type=data.get("proposalType"),
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass
class HonorarioResult:
    percentual: Decimal
    valor: Decimal
    minimo: Decimal
    economia_min: Decimal
    economia_max: Decimal


@dataclass
class OutrasAcoesResult:
    percentual: Decimal
    valor: Decimal
    minimo: Decimal
    economia_min: Decimal
    economia_max: Decimal
    indenizacao: Decimal


@dataclass
class ConsignadoResult:
    percentual: Decimal
    economia: Decimal


@dataclass
class ClausulaTetoResult:
    percentual: Decimal
    valor: Decimal


@dataclass
class FeeResults:
    """The three proposal variants plus the opt-in cap clause."""

    honorario: HonorarioResult
    outras_acoes: OutrasAcoesResult
    consignado: ConsignadoResult
    clausula_teto: ClausulaTetoResult | None = None


@dataclass
class PaymentPlan:
    """Installment schedules for card and bank slip."""

    value: Decimal
    installments: int
    cartao_parcela: Decimal
    boleto_entrada: Decimal
    boleto_restante: Decimal
    boleto_parcela: Decimal


@dataclass
class CalculationResult:
    """Final output of a calculator run."""

    input: CalculationInput
    fees: FeeResults | None
    payment_plans: dict = field(default_factory=dict)


@dataclass
class MonthlyCommission:
    """Closed proposals of one calendar month and their commission."""

    month: str
    month_number: int
    year: int
    total_contracts: int = 0
    total_honorarios: Decimal = Decimal("0")
    total_commission: Decimal = Decimal("0")
    contracts: list[Proposal] = field(default_factory=list)


@dataclass
class CommissionReport:
    rate: Decimal
    months: list[MonthlyCommission]
    total_contracts: int
    total_honorarios: Decimal
    total_commissions: Decimal
    current_month_commission: Decimal
    available_years: list[int] = field(default_factory=list)
    available_months: list[int] = field(default_factory=list)


@dataclass
class MonthlyEvolution:
    month: str
    year: int
    month_number: int
    leads: int
    fechamentos: int


@dataclass
class KpiReport:
    """Funnel KPIs over a rolling window."""

    period_days: int
    total_leads: int
    leads_novos: int
    reunioes_agendadas: int
    propostas_enviadas: int
    contratos_assinados: int
    contratos_recusados: int
    leads_perdidos: int
    taxa_conversao_reuniao: str
    taxa_fechamento: str
    receita_gerada: Decimal
    ticket_medio: Decimal
    comissao_gerada: Decimal
    status_distribution: list[dict] = field(default_factory=list)
    origem_distribution: list[dict] = field(default_factory=list)
    top_bancos: list[dict] = field(default_factory=list)
    evolucao_mensal: list[MonthlyEvolution] = field(default_factory=list)
