from datetime import datetime, timezone

import pytest

from faucetswap.core.service.chains.models import DonationRecord

DONOR = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
NEWCOMER = "0x0000000000000000000000000000000000000001"


@pytest.fixture
def donor(chain_manager):
    ethereum = chain_manager.get_adapter("ethereum")
    ethereum.donated = {DONOR: "6"}
    ethereum.donations = [
        DonationRecord(chain="ethereum", donor=DONOR, amount="6", timestamp=datetime(2025, 1, 1, tzinfo=timezone.utc))
    ]
    return DONOR


async def test_eligibility(api_client, donor):
    body = (await api_client.get(f"/api/v1/badges/eligibility/{donor}")).json()

    assert body["eligible"] is True
    assert body["currentLevel"] == 3
    assert body["currentLevelName"] == "Gold"
    assert body["nextLevel"] == 4
    assert body["requiredAmount"] == "4"
    assert body["reason"] == "Qualified for Gold badge"


async def test_eligibility_without_donations(api_client):
    body = (await api_client.get(f"/api/v1/badges/eligibility/{NEWCOMER}")).json()

    assert body["eligible"] is False
    assert body["reason"] == "No contributions found across any chain"


async def test_metadata(api_client, donor):
    body = (await api_client.get(f"/api/v1/badges/metadata/{donor}")).json()

    assert body["levelName"] == "Gold"
    assert [a["trait_type"] for a in body["attributes"]] == [
        "Contributor Level", "Total Donated", "Chains Contributed", "Active Chains", "Issue Date"
    ]


async def test_metadata_for_ineligible_address_is_null(api_client):
    response = await api_client.get(f"/api/v1/badges/metadata/{NEWCOMER}")

    assert response.status_code == 200
    assert response.json() is None


async def test_upgrade(api_client, donor):
    body = (await api_client.get(f"/api/v1/badges/upgrade/{donor}", params={"currentLevel": 1})).json()
    assert body["canUpgrade"] is True
    assert body["newLevelName"] == "Gold"

    out_of_range = await api_client.get(f"/api/v1/badges/upgrade/{donor}", params={"currentLevel": 5})
    assert out_of_range.status_code == 422


async def test_chain_badge_info(api_client, donor):
    body = (await api_client.get(f"/api/v1/badges/chain/ethereum/{donor}")).json()

    assert body["badgeEligible"] is True
    assert body["chainRanking"]["userRank"] == 1
    assert body["poolStats"]["symbol"] == "ETH"


async def test_chain_badge_info_unknown_chain(api_client, donor):
    response = await api_client.get(f"/api/v1/badges/chain/solana/{donor}")
    assert response.status_code == 404


async def test_requirements(api_client):
    body = (await api_client.get("/api/v1/badges/requirements")).json()
    assert [level["requiredDonation"] for level in body["levels"]] == ["0.1", "1.0", "5.0", "10.0"]


async def test_leaderboard(api_client, donor):
    body = (await api_client.get("/api/v1/badges/leaderboard", params={"limit": 10})).json()

    assert body["total"] == 1
    assert body["topContributors"][0]["address"] == donor
    assert body["topContributors"][0]["levelName"] == "Gold"
