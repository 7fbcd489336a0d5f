"""
Input Validation for the CRM Engine

Validates proposal and lead data before it reaches the repository.
Raises ValueError with clear messages for any constraint violations.
"""

from decimal import Decimal

from .models import (
    LEAD_PROPOSAL_TYPES,
    LEAD_STATUSES,
    PROPOSAL_STATUSES,
    PROPOSAL_TYPES,
    Lead,
    Proposal,
    read_text,
)

PROPOSAL_UPDATE_FIELDS = {
    "status", "notes", "proposalType", "proposalValue",
    "clientName", "clientPhone", "clientDocument",
    "debtValue", "economiaValue", "indenizacaoValue",
}

PROPOSAL_TEXT_FIELDS = ("clientName", "clientPhone", "clientDocument", "notes")


class InputValidator:
    """Validates proposals and leads according to business rules."""

    def validate_proposal(self, proposal: Proposal) -> None:
        """
        Run all proposal checks. Raises ValueError if any check fails.
        """
        if not proposal.client_name or not proposal.client_document:
            raise ValueError("clientName and clientDocument are required to save a proposal")

        self.validate_proposal_type(proposal.proposal_type)
        self.validate_proposal_status(proposal.status)

        for label, amount in (
            ("debtValue", proposal.debt_value),
            ("economiaValue", proposal.economia_value),
            ("indenizacaoValue", proposal.indenizacao_value),
            ("proposalValue", proposal.proposal_value),
        ):
            self._validate_non_negative(label, amount)

    def validate_proposal_update(self, changes: dict) -> None:
        """
        Check a partial update.

        The proposal value and type may only change together with a status.
        """
        if not changes:
            raise ValueError("No fields to update")

        unknown = set(changes) - PROPOSAL_UPDATE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if "status" in changes:
            self.validate_proposal_status(changes["status"])

        if ("proposalValue" in changes or "proposalType" in changes) and "status" not in changes:
            raise ValueError("proposalValue and proposalType can only change together with status")

        if "proposalType" in changes:
            self.validate_proposal_type(changes["proposalType"])

        for key in PROPOSAL_TEXT_FIELDS:
            if key in changes:
                text = read_text(changes, key)
                if not text and key in ("clientName", "clientDocument"):
                    raise ValueError(f"{key} cannot be empty")

    def validate_lead(self, lead: Lead) -> None:
        """Required intake fields, then enumerations."""
        missing = [
            label
            for label, value in (
                ("clientName", lead.client_name),
                ("clientDocument", lead.client_document),
                ("clientPhone", lead.client_phone),
                ("bankName", lead.bank_name),
            )
            if not value
        ]
        if lead.debt_value <= 0:
            missing.append("debtValue")
        if missing:
            raise ValueError(f"Required fields missing: {', '.join(missing)}")

        self.validate_lead_status(lead.status)

        if lead.proposal_type is not None and lead.proposal_type not in LEAD_PROPOSAL_TYPES:
            raise ValueError(
                f"Invalid lead proposalType: {lead.proposal_type}. "
                f"Must be one of {', '.join(LEAD_PROPOSAL_TYPES)}"
            )
        if lead.proposal_value is not None:
            self._validate_non_negative("proposalValue", lead.proposal_value)

    def validate_proposal_type(self, proposal_type) -> None:
        if proposal_type not in PROPOSAL_TYPES:
            raise ValueError(
                f"Invalid proposalType: {proposal_type}. Must be one of {', '.join(PROPOSAL_TYPES)}"
            )

    def validate_proposal_status(self, status) -> None:
        if status not in PROPOSAL_STATUSES:
            raise ValueError(
                f"Invalid status: {status}. Must be one of {', '.join(PROPOSAL_STATUSES)}"
            )

    def validate_lead_status(self, status) -> None:
        if status not in LEAD_STATUSES:
            raise ValueError(f"Invalid lead status: {status}. Must be one of {', '.join(LEAD_STATUSES)}")

    def _validate_non_negative(self, label: str, amount: Decimal) -> None:
        if amount < 0:
            raise ValueError(f"{label} cannot be negative, got: {amount}")
