"""
Unit Tests for Lead Workflow Helpers
"""

from datetime import datetime
from decimal import Decimal

import pytest

from crm_engine.leads import append_note, filter_leads, filter_proposals, lead_stats, meeting_note
from crm_engine.models import Lead, Proposal


def make_lead(name, status="novo", bank="Itaú", document="12345678900",
              phone="11999999999", proposal_value=None):
    return Lead(
        id=name,
        client_name=name,
        client_phone=phone,
        client_document=document,
        bank_name=bank,
        debt_value=Decimal("50000"),
        status=status,
        proposal_value=proposal_value,
    )


class TestNotes:

    def test_append_note_keeps_history(self):
        notes = append_note("Primeiro contato", "Cliente retornou", datetime(2025, 6, 1, 14, 30, 0))
        assert notes == "Primeiro contato\n01/06/2025 14:30:00: Cliente retornou"

    def test_append_twice(self):
        notes = append_note("", "A", datetime(2025, 6, 1, 9, 0, 0))
        notes = append_note(notes, "B", datetime(2025, 6, 2, 9, 0, 0))
        assert notes == "\n01/06/2025 09:00:00: A\n02/06/2025 09:00:00: B"

    def test_meeting_note(self):
        assert meeting_note(datetime(2025, 7, 3, 15, 0)) == "Reunião agendada para 03/07/2025"


class TestFilterLeads:

    @pytest.fixture
    def leads(self):
        return [
            make_lead("Maria Souza", status="novo", bank="Itaú", document="98765432100"),
            make_lead("João Silva", status="em_reuniao", bank="Bradesco", phone="21988887777"),
            make_lead("Ana Lima", status="novo", bank="Santander"),
        ]

    def test_no_filters(self, leads):
        assert len(filter_leads(leads)) == 3

    def test_name_is_case_insensitive(self, leads):
        assert [lead.client_name for lead in filter_leads(leads, "maria")] == ["Maria Souza"]

    def test_bank_is_case_insensitive(self, leads):
        assert [lead.client_name for lead in filter_leads(leads, "BRADESCO")] == ["João Silva"]

    def test_document_and_phone(self, leads):
        assert [lead.client_name for lead in filter_leads(leads, "987654")] == ["Maria Souza"]
        assert [lead.client_name for lead in filter_leads(leads, "21988")] == ["João Silva"]

    def test_status_filter(self, leads):
        result = filter_leads(leads, status="novo")
        assert [lead.client_name for lead in result] == ["Maria Souza", "Ana Lima"]

    def test_search_and_status(self, leads):
        assert filter_leads(leads, "silva", status="novo") == []


class TestLeadStats:

    def test_counts_and_rates(self):
        leads = [
            make_lead("A", status="novo"),
            make_lead("B", status="em_reuniao"),
            make_lead("C", status="proposta_enviada", proposal_value=Decimal("3000")),
            make_lead("D", status="fechado", proposal_value=Decimal("5000")),
        ]
        stats = lead_stats(leads)

        assert stats["total"] == 4
        assert stats["novos"] == 1
        assert stats["emReuniao"] == 1
        assert stats["propostaEnviada"] == 1
        assert stats["fechados"] == 1
        assert stats["perdidos"] == 0
        assert stats["taxaFechamento"] == "25.0"
        assert stats["ticketMedio"] == Decimal("4000")

    def test_empty(self):
        stats = lead_stats([])

        assert stats["total"] == 0
        assert stats["taxaFechamento"] == "0"
        assert stats["ticketMedio"] == Decimal("0")


class TestFilterProposals:

    @pytest.fixture
    def proposals(self):
        def make(name, status, document, phone):
            return Proposal(
                id=name,
                client_name=name,
                client_phone=phone,
                client_document=document,
                debt_value=Decimal("100000"),
                economia_value=Decimal("0"),
                indenizacao_value=Decimal("0"),
                proposal_type="honorario",
                proposal_value=Decimal("3000"),
                status=status,
            )

        return [
            make("Ana Lima", "pendente", "11122233344", "11911112222"),
            make("Bruno Costa", "fechado", "55566677788", "21933334444"),
        ]

    def test_name_is_case_insensitive(self, proposals):
        assert [p.client_name for p in filter_proposals(proposals, "ANA")] == ["Ana Lima"]

    def test_document_and_phone(self, proposals):
        assert [p.client_name for p in filter_proposals(proposals, "55566")] == ["Bruno Costa"]
        assert [p.client_name for p in filter_proposals(proposals, "219333")] == ["Bruno Costa"]

    def test_status(self, proposals):
        assert [p.client_name for p in filter_proposals(proposals, status="fechado")] == ["Bruno Costa"]

    def test_todos_and_all_keep_everything(self, proposals):
        assert len(filter_proposals(proposals, status="todos")) == 2
        assert len(filter_proposals(proposals, status="all")) == 2
