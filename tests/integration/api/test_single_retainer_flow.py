"""Integration test for the basic monthly flow of a single retainer

One contract with one 50 000 CZK service starting on the first day of the
month: generate, approve the only line, issue, read the ledger.
"""

import re
import pytest
import pytest_asyncio
from datetime import date, datetime
from decimal import Decimal

from config import ApplicationConfig
from src.adapter.services.invoicing_provider import SimulatedInvoicingProvider
from src.domain.client import Client
from src.domain.engagement import Engagement, EngagementStatus, EngagementType
from src.domain.engagement_service import BillingType, EngagementService

BASE = "/api/invoicing/2024/1"
INVOICE_ID = "inv-eng-1-2024-1"
LINE_ID = "li-svc-1-2024-1"


@pytest_asyncio.fixture
async def single_retainer(db_session, app):
    """eng-1 from 2024-01-01, no end date, one monthly service at 50000"""
    db_session.add_all(
        [
            Client(id="client-1", name="Kavárna Praha s.r.o."),
            Engagement(
                id="eng-1", client_id="client-1", name="Správa sociálních sítí",
                type=EngagementType.RETAINER, status=EngagementStatus.ACTIVE,
                monthly_fee=Decimal("50000"), currency="CZK", start_date=date(2024, 1, 1),
            ),
            EngagementService(
                id="svc-1", engagement_id="eng-1", name="Social media management",
                price=Decimal("50000"), currency="CZK", billing_type=BillingType.MONTHLY,
                created_at=datetime(2024, 1, 1),
            ),
        ]
    )
    await db_session.commit()
    # Provider with its default random sequence start
    app.state.invoicing_provider = SimulatedInvoicingProvider(ApplicationConfig.INVOICING_PROVIDER_URL)


@pytest.mark.asyncio
class TestSingleRetainerFlow:
    async def test_generate_approve_and_issue(self, client, single_retainer):
        """
        Given: One retainer with one 50 000 CZK service for the whole month
        When: January 2024 is generated, the line approved and the invoice issued
        Then: One ledger entry of 50 000 with a YYYY-NNNN provider number
        """
        # Generate
        listing = (await client.post(f"{BASE}/generate")).json()

        assert [inv["id"] for inv in listing["invoices"]] == [INVOICE_ID]
        (line,) = listing["invoices"][0]["line_items"]
        assert line["id"] == LINE_ID
        assert Decimal(line["final_amount"]) == Decimal("50000")
        assert line["is_approved"] is False

        # Approve
        approved = await client.patch(
            f"{BASE}/invoices/{INVOICE_ID}/items/{LINE_ID}", json={"is_approved": True}
        )
        assert approved.status_code == 200

        # Issue
        response = await client.post(f"{BASE}/issue", json={"invoice_ids": [INVOICE_ID]})

        assert response.status_code == 200
        outcome = response.json()
        assert outcome["issued_count"] == 1
        assert outcome["failed"] == []
        assert re.fullmatch(r"\d{4}-\d{4}", outcome["issued"][0]["external_number"])

        history = (await client.get("/api/invoicing/issued", params={"year": 2024})).json()
        assert history["count"] == 1
        (entry,) = history["invoices"]
        assert Decimal(entry["total_amount"]) == Decimal("50000")
        assert re.fullmatch(r"\d{4}-\d{4}", entry["external_number"])
        assert entry["external_number"].startswith("2024-")
