"""
Lead Workflow Helpers

Pure functions behind the lead screen: the append-only notes log,
search/status filtering and the summary statistics panel. The proposal
history screen shares the same search/status filtering.
"""

from datetime import datetime
from decimal import Decimal

from .models import Lead, Proposal
from .calculators.kpi import format_rate

NOTE_TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"

ALL_STATUSES = ("all", "todos")


def append_note(notes: str, text: str, now: datetime) -> str:
    """Add a timestamped line; earlier notes are never rewritten."""
    return f"{notes}\n{now.strftime(NOTE_TIMESTAMP_FORMAT)}: {text}"


def meeting_note(meeting_date: datetime) -> str:
    return f"Reunião agendada para {meeting_date.strftime('%d/%m/%Y')}"


def filter_leads(leads: list[Lead], search: str = "", status: str = "all") -> list[Lead]:
    """
    Search name, document, phone and bank; then narrow by status.

    Name and bank match case-insensitively, document and phone literally.
    """
    filtered = leads

    if search:
        term = search.lower()
        filtered = [
            lead
            for lead in filtered
            if term in lead.client_name.lower()
            or search in lead.client_document
            or search in lead.client_phone
            or term in lead.bank_name.lower()
        ]

    if status and status not in ALL_STATUSES:
        filtered = [lead for lead in filtered if lead.status == status]

    return filtered


def filter_proposals(
    proposals: list[Proposal], search: str = "", status: str = "all"
) -> list[Proposal]:
    """Search name (case-insensitive), document and phone; "all" or "todos" keeps every status."""
    filtered = proposals

    if search:
        term = search.lower()
        filtered = [
            p
            for p in filtered
            if term in p.client_name.lower()
            or search in p.client_document
            or search in p.client_phone
        ]

    if status and status not in ALL_STATUSES:
        filtered = [p for p in filtered if p.status == status]

    return filtered


def lead_stats(leads: list[Lead]) -> dict:
    """Counts per status, close rate and average ticket of leads with a proposal."""

    def count(status: str) -> int:
        return sum(1 for lead in leads if lead.status == status)

    with_proposal = [lead.proposal_value for lead in leads if lead.proposal_value]
    ticket = sum(with_proposal, Decimal("0")) / max(len(with_proposal), 1)

    return {
        "total": len(leads),
        "novos": count("novo"),
        "emReuniao": count("em_reuniao"),
        "propostaEnviada": count("proposta_enviada"),
        "fechados": count("fechado"),
        "perdidos": count("perdido"),
        "taxaFechamento": format_rate(count("fechado"), len(leads)),
        "ticketMedio": ticket,
    }
