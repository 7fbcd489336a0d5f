"""Persistence layer for proposals and leads.

Both collections live in one SQLAlchemy database. It defaults to SQLite for
local development, but accepts any SQLAlchemy-compatible URL (e.g.
PostgreSQL/MySQL) for shared deployments.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import Column, DateTime, Numeric, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from .leads import append_note, meeting_note
from .models import Lead, Proposal
from .parsing import parse_value

logger = logging.getLogger(__name__)

Base = declarative_base()

MONEY = Numeric(14, 2)

# Wire key -> column for proposal updates
PROPOSAL_COLUMNS = {
    "status": "status",
    "notes": "notes",
    "proposalType": "proposal_type",
    "proposalValue": "proposal_value",
    "clientName": "client_name",
    "clientPhone": "client_phone",
    "clientDocument": "client_document",
    "debtValue": "debt_value",
    "economiaValue": "economia_value",
    "indenizacaoValue": "indenizacao_value",
}
MONEY_COLUMNS = {"proposal_value", "debt_value", "economia_value", "indenizacao_value"}


class NotFoundError(LookupError):
    """Raised when a proposal or lead id does not exist."""


class ProposalModel(Base):
    __tablename__ = "proposals"

    id = Column(String(32), primary_key=True)
    user_id = Column(String(64), index=True, nullable=True)
    client_name = Column(String(255), nullable=False)
    client_phone = Column(String(64), nullable=False, default="")
    client_document = Column(String(64), nullable=False)
    debt_value = Column(MONEY, nullable=False)
    economia_value = Column(MONEY, nullable=False)
    indenizacao_value = Column(MONEY, nullable=False)
    proposal_type = Column(String(20), nullable=False)
    proposal_value = Column(MONEY, nullable=False)
    status = Column(String(20), nullable=False, default="pendente")
    notes = Column(Text, nullable=False, default="")
    date = Column(DateTime, default=datetime.now, nullable=False, index=True)


class LeadModel(Base):
    __tablename__ = "leads"

    id = Column(String(32), primary_key=True)
    client_name = Column(String(255), nullable=False)
    client_phone = Column(String(64), nullable=False)
    client_document = Column(String(64), nullable=False)
    client_email = Column(String(255), nullable=False, default="")
    bank_name = Column(String(255), nullable=False)
    debt_value = Column(MONEY, nullable=False)
    current_situation = Column(Text, nullable=False, default="")
    origem = Column(String(64), nullable=False, default="")
    status = Column(String(20), nullable=False, default="novo")
    meeting_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.now, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)
    proposal_value = Column(MONEY, nullable=True)
    proposal_type = Column(String(20), nullable=True)


class CrmStore:
    """Database-backed store for proposals and leads."""

    def __init__(self, url: str) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)

    # -------------------------------------------------------------------------
    # Proposals
    # -------------------------------------------------------------------------

    def create_proposal(self, proposal: Proposal, user_id: str | None = None) -> Proposal:
        row = ProposalModel(
            id=uuid.uuid4().hex,
            user_id=user_id or proposal.user_id,
            client_name=proposal.client_name,
            client_phone=proposal.client_phone,
            client_document=proposal.client_document,
            debt_value=proposal.debt_value,
            economia_value=proposal.economia_value,
            indenizacao_value=proposal.indenizacao_value,
            proposal_type=proposal.proposal_type,
            proposal_value=proposal.proposal_value,
            status=proposal.status,
            notes=proposal.notes,
            date=proposal.date or datetime.now(),
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        logger.info(f"Proposal created: {row.id} ({row.proposal_type})")
        return self._proposal_from_row(row)

    def get_proposal(self, proposal_id: str) -> Proposal:
        with self._session_factory() as session:
            row = session.get(ProposalModel, proposal_id)
            if row is None:
                raise NotFoundError(f"Proposal not found: {proposal_id}")
            return self._proposal_from_row(row)

    def list_proposals(self) -> List[Proposal]:
        """All proposals, most recent first."""
        with self._session_factory() as session:
            rows = session.execute(
                select(ProposalModel).order_by(ProposalModel.date.desc())
            ).scalars()
            return [self._proposal_from_row(row) for row in rows]

    def update_proposal(self, proposal_id: str, changes: Dict[str, Any]) -> Proposal:
        """Apply a validated partial update (wire keys) to one proposal."""
        with self._session_factory() as session:
            row = session.get(ProposalModel, proposal_id)
            if row is None:
                raise NotFoundError(f"Proposal not found: {proposal_id}")

            for key, value in changes.items():
                column = PROPOSAL_COLUMNS[key]
                if column in MONEY_COLUMNS:
                    value = parse_value(value)
                elif column == "notes":
                    value = value or ""
                setattr(row, column, value)

            session.commit()
            logger.info(f"Proposal updated: {proposal_id} ({', '.join(sorted(changes))})")
            return self._proposal_from_row(row)

    # -------------------------------------------------------------------------
    # Leads
    # -------------------------------------------------------------------------

    def create_lead(self, lead: Lead, now: datetime | None = None) -> Lead:
        now = now or datetime.now()
        row = LeadModel(
            id=uuid.uuid4().hex,
            client_name=lead.client_name,
            client_phone=lead.client_phone,
            client_document=lead.client_document,
            client_email=lead.client_email,
            bank_name=lead.bank_name,
            debt_value=lead.debt_value,
            current_situation=lead.current_situation,
            origem=lead.origem,
            status="novo",
            meeting_date=lead.meeting_date,
            notes=lead.notes,
            created_at=now,
            updated_at=now,
            proposal_value=lead.proposal_value,
            proposal_type=lead.proposal_type,
        )
        with self._session_factory() as session:
            session.add(row)
            session.commit()
        logger.info(f"Lead created: {row.id}")
        return self._lead_from_row(row)

    def get_lead(self, lead_id: str) -> Lead:
        with self._session_factory() as session:
            return self._lead_from_row(self._get_lead_row(session, lead_id))

    def list_leads(self) -> List[Lead]:
        """All leads in intake order."""
        with self._session_factory() as session:
            rows = session.execute(
                select(LeadModel).order_by(LeadModel.created_at.asc())
            ).scalars()
            return [self._lead_from_row(row) for row in rows]

    def update_lead_status(
        self, lead_id: str, status: str, note: str | None = None, now: datetime | None = None
    ) -> Lead:
        now = now or datetime.now()
        with self._session_factory() as session:
            row = self._get_lead_row(session, lead_id)
            row.status = status
            row.updated_at = now
            if note:
                row.notes = append_note(row.notes, note, now)
            session.commit()
            logger.info(f"Lead {lead_id} moved to {status}")
            return self._lead_from_row(row)

    def schedule_meeting(self, lead_id: str, meeting_date: datetime, now: datetime | None = None) -> Lead:
        """Book a meeting: the lead moves to em_reuniao and the booking is noted."""
        now = now or datetime.now()
        with self._session_factory() as session:
            row = self._get_lead_row(session, lead_id)
            row.meeting_date = meeting_date
            row.status = "em_reuniao"
            row.updated_at = now
            row.notes = append_note(row.notes, meeting_note(meeting_date), now)
            session.commit()
            logger.info(f"Meeting scheduled for lead {lead_id}: {meeting_date.isoformat()}")
            return self._lead_from_row(row)

    @staticmethod
    def _get_lead_row(session, lead_id: str) -> LeadModel:
        row = session.get(LeadModel, lead_id)
        if row is None:
            raise NotFoundError(f"Lead not found: {lead_id}")
        return row

    @staticmethod
    def _proposal_from_row(row: ProposalModel) -> Proposal:
        return Proposal(
            id=row.id,
            client_name=row.client_name,
            client_phone=row.client_phone,
            client_document=row.client_document,
            debt_value=row.debt_value,
            economia_value=row.economia_value,
            indenizacao_value=row.indenizacao_value,
            proposal_type=row.proposal_type,
            proposal_value=row.proposal_value,
            status=row.status,
            notes=row.notes,
            date=row.date,
            user_id=row.user_id,
        )

    @staticmethod
    def _lead_from_row(row: LeadModel) -> Lead:
        return Lead(
            id=row.id,
            client_name=row.client_name,
            client_phone=row.client_phone,
            client_document=row.client_document,
            bank_name=row.bank_name,
            debt_value=row.debt_value,
            client_email=row.client_email,
            current_situation=row.current_situation,
            origem=row.origem,
            status=row.status,
            meeting_date=row.meeting_date,
            notes=row.notes,
            created_at=row.created_at,
            updated_at=row.updated_at,
            proposal_value=row.proposal_value,
            proposal_type=row.proposal_type,
        )


def create_store_from_env(url: str | None) -> CrmStore:
    return CrmStore(url or "sqlite:///crm_data.sqlite3")
