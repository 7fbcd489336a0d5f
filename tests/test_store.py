"""Tests for the SQLAlchemy-backed proposal and lead store."""

from datetime import datetime
from decimal import Decimal

import pytest

from crm_engine.models import Lead, Proposal
from crm_engine.store import CrmStore, NotFoundError, create_store_from_env


def make_proposal(value="3000", status="pendente", date=None, name="João da Silva"):
    return Proposal(
        id="",
        client_name=name,
        client_phone="11999999999",
        client_document="12345678900",
        debt_value=Decimal("100000"),
        economia_value=Decimal("20000"),
        indenizacao_value=Decimal("0"),
        proposal_type="honorario",
        proposal_value=Decimal(value),
        status=status,
        date=date,
    )


def make_lead(name="Maria Souza", notes=""):
    return Lead(
        id="",
        client_name=name,
        client_phone="11988887777",
        client_document="98765432100",
        bank_name="Itaú",
        debt_value=Decimal("45000"),
        origem="WhatsApp",
        status="perdido",
        notes=notes,
    )


@pytest.fixture
def store():
    return CrmStore("sqlite://")


class TestProposals:

    def test_create_assigns_id_and_date(self, store):
        saved = store.create_proposal(make_proposal(), user_id="closer-1")

        assert saved.id
        assert saved.date is not None
        assert saved.user_id == "closer-1"
        assert saved.proposal_value == Decimal("3000")

    def test_ids_are_unique(self, store):
        first = store.create_proposal(make_proposal())
        second = store.create_proposal(make_proposal())
        assert first.id != second.id

    def test_get_round_trip(self, store):
        saved = store.create_proposal(make_proposal("4321.55"))
        loaded = store.get_proposal(saved.id)

        assert loaded.client_name == "João da Silva"
        assert loaded.proposal_value == Decimal("4321.55")
        assert loaded.status == "pendente"

    def test_get_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            store.get_proposal("missing")

    def test_list_most_recent_first(self, store):
        store.create_proposal(make_proposal(date=datetime(2025, 1, 1), name="Old"))
        store.create_proposal(make_proposal(date=datetime(2025, 6, 1), name="New"))
        store.create_proposal(make_proposal(date=datetime(2025, 3, 1), name="Mid"))

        assert [p.client_name for p in store.list_proposals()] == ["New", "Mid", "Old"]

    def test_update_status_and_notes(self, store):
        saved = store.create_proposal(make_proposal())
        updated = store.update_proposal(saved.id, {"status": "fechado", "notes": "Assinado"})

        assert updated.status == "fechado"
        assert updated.notes == "Assinado"
        assert store.get_proposal(saved.id).status == "fechado"

    def test_update_money_is_parsed(self, store):
        saved = store.create_proposal(make_proposal())
        updated = store.update_proposal(
            saved.id, {"status": "fechado", "proposalValue": "5.000,00"}
        )
        assert updated.proposal_value == Decimal("5000")

    def test_update_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            store.update_proposal("missing", {"status": "fechado"})


class TestLeads:

    def test_create_forces_novo(self, store):
        saved = store.create_lead(make_lead(), now=datetime(2025, 6, 1, 9, 0))

        assert saved.id
        assert saved.status == "novo"
        assert saved.created_at == datetime(2025, 6, 1, 9, 0)
        assert saved.updated_at == saved.created_at

    def test_list_in_intake_order(self, store):
        store.create_lead(make_lead("B"), now=datetime(2025, 6, 2))
        store.create_lead(make_lead("A"), now=datetime(2025, 6, 1))

        assert [lead.client_name for lead in store.list_leads()] == ["A", "B"]

    def test_status_change_appends_note(self, store):
        saved = store.create_lead(make_lead(notes="Primeiro contato"))
        updated = store.update_lead_status(
            saved.id, "proposta_enviada", "Proposta enviada por e-mail",
            now=datetime(2025, 6, 3, 10, 15, 0),
        )

        assert updated.status == "proposta_enviada"
        assert updated.notes == "Primeiro contato\n03/06/2025 10:15:00: Proposta enviada por e-mail"
        assert updated.updated_at == datetime(2025, 6, 3, 10, 15, 0)

    def test_status_change_without_note_keeps_notes(self, store):
        saved = store.create_lead(make_lead(notes="Primeiro contato"))
        updated = store.update_lead_status(saved.id, "perdido")
        assert updated.notes == "Primeiro contato"

    def test_schedule_meeting(self, store):
        saved = store.create_lead(make_lead())
        updated = store.schedule_meeting(
            saved.id, datetime(2025, 7, 3, 15, 0), now=datetime(2025, 6, 20, 8, 0, 0)
        )

        assert updated.status == "em_reuniao"
        assert updated.meeting_date == datetime(2025, 7, 3, 15, 0)
        assert updated.notes.endswith("20/06/2025 08:00:00: Reunião agendada para 03/07/2025")

    def test_unknown_lead_raises(self, store):
        with pytest.raises(NotFoundError):
            store.get_lead("missing")
        with pytest.raises(NotFoundError):
            store.update_lead_status("missing", "perdido")
        with pytest.raises(NotFoundError):
            store.schedule_meeting("missing", datetime(2025, 7, 3))


class TestStoreFactory:

    def test_uses_given_url(self):
        store = create_store_from_env("sqlite://")
        assert store.list_proposals() == []
