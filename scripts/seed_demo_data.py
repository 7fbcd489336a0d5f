#!/usr/bin/env python3
"""
Seed the database with a demo proposal and a demo lead.

Uses DATABASE_URL (defaults to the local SQLite file).

Run: python scripts/seed_demo_data.py
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from crm_engine import CrmProcessor, CrmStore, config  # noqa: E402


def main() -> int:
    store = CrmStore(config.DATABASE_URL)
    processor = CrmProcessor()

    proposal = processor.build_proposal(
        {
            "clientName": "João da Silva",
            "clientPhone": "11999999999",
            "clientDocument": "12345678900",
            "debtValue": 100000,
            "economiaValue": 20000,
            "indenizacaoValue": 5000,
            "proposalType": "honorario",
        },
        user_id="admin",
    )
    saved = store.create_proposal(proposal)
    print(f"Proposal created: {saved.id} ({saved.proposal_type}, R$ {saved.proposal_value})")

    lead = processor.build_lead(
        {
            "clientName": "Maria Souza",
            "clientPhone": "(11) 98888-7777",
            "clientDocument": "987.654.321-00",
            "bankName": "Itaú",
            "debtValue": "45.000,00",
            "currentSituation": "Negativação/SPC-Serasa",
            "origem": "WhatsApp",
        }
    )
    saved_lead = store.create_lead(lead)
    print(f"Lead created: {saved_lead.id} ({saved_lead.client_name})")

    return 0


if __name__ == "__main__":
    sys.exit(main())
