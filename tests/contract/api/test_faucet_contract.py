from eth_account import Account

from faucetswap.core.dependencies import settings

POOL_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


async def request_faucet(api_client, headers, chain="ethereum", source="OFFICIAL_FAUCET"):
    return await api_client.post("/api/v1/faucet/request", headers=headers, json={"chain": chain, "source": source})


async def test_official_request_contract(api_client, login):
    headers, _ = await login()

    response = await request_faucet(api_client, headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "PENDING"
    assert body["redirectUrl"] == "https://faucet.ethereum.test"
    assert body["contractInfo"] is None
    assert body["token"] == "ETH"
    assert body["amount"] == "0.1"
    assert {"requestId", "cooldownUntil", "message"} <= set(body)


async def test_pool_request_returns_contract_call(api_client, login):
    headers, _ = await login()

    body = (await request_faucet(api_client, headers, chain="polygon", source="COMMUNITY_POOL")).json()

    assert body["status"] == "PROCESSING"
    assert body["redirectUrl"] is None
    assert body["contractInfo"]["contractAddress"] == POOL_ADDRESS
    assert body["contractInfo"]["method"] == "requestFaucet"


async def test_second_request_hits_cooldown(api_client, login):
    headers, _ = await login()
    await request_faucet(api_client, headers)

    response = await request_faucet(api_client, headers)

    assert response.status_code == 429
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "COOLDOWN_ACTIVE"
    assert body["error"]["message"] == "Cooldown active. Try again in 12 hours"
    details = body["error"]["details"]
    assert 0 < details["remainingTime"] <= 12 * 3_600_000
    assert details["remainingHours"] == 12
    assert details["cooldownUntil"]


async def test_other_chain_not_blocked_by_cooldown(api_client, login):
    headers, _ = await login()
    await request_faucet(api_client, headers)

    response = await request_faucet(api_client, headers, chain="sui")

    assert response.status_code == 201


async def test_request_requires_auth(api_client):
    response = await request_faucet(api_client, {})
    assert response.status_code == 401


async def test_request_on_unknown_chain(api_client, login):
    headers, _ = await login()

    response = await request_faucet(api_client, headers, chain="solana")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "CHAIN_NOT_CONFIGURED"


async def test_request_with_bad_source_is_validation_error(api_client, login):
    headers, _ = await login()

    response = await request_faucet(api_client, headers, source="AIRDROP")

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "INVALID_INPUT"


async def test_status_update_flow(api_client, login):
    headers, _ = await login()
    request_id = (await request_faucet(api_client, headers)).json()["requestId"]
    url = f"/api/v1/faucet/request/{request_id}/status"

    done = await api_client.patch(url, headers=headers, json={"status": "SUCCESS", "txHash": "0xfeed"})
    assert done.status_code == 200
    assert done.json()["status"] == "SUCCESS"
    assert done.json()["txHash"] == "0xfeed"
    assert done.json()["completedAt"]

    again = await api_client.patch(url, headers=headers, json={"status": "FAILED"})
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"


async def test_status_update_by_other_user_forbidden(api_client, login):
    owner_headers, _ = await login()
    other_headers, _ = await login()
    request_id = (await request_faucet(api_client, owner_headers)).json()["requestId"]

    response = await api_client.patch(
        f"/api/v1/faucet/request/{request_id}/status", headers=other_headers, json={"status": "FAILED"}
    )

    assert response.status_code == 403


async def test_status_update_of_missing_request(api_client, login):
    headers, _ = await login()

    response = await api_client.patch(
        "/api/v1/faucet/request/00000000-0000-0000-0000-000000000000/status",
        headers=headers,
        json={"status": "SUCCESS"}
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "REQUEST_NOT_FOUND"


async def test_cooldown_and_history_endpoints(api_client, login):
    headers, body = await login()
    address = body["user"]["address"]
    await request_faucet(api_client, headers)

    cooldown = (await api_client.get(f"/api/v1/faucet/cooldown/{address}")).json()
    by_chain = {c["chain"]: c for c in cooldown["cooldowns"]}
    assert by_chain["ethereum"]["canClaim"] is False
    assert by_chain["polygon"]["canClaim"] is True

    single = (await api_client.get(f"/api/v1/faucet/cooldown/{address}/ethereum")).json()
    assert [c["chain"] for c in single["cooldowns"]] == ["ethereum"]

    history = (await api_client.get(f"/api/v1/faucet/history/{address}")).json()
    assert len(history) == 1
    assert history[0]["chain"] == "ethereum"


async def test_statistics_and_pools(api_client, login):
    headers, _ = await login()
    await request_faucet(api_client, headers)

    stats = (await api_client.get("/api/v1/faucet/statistics")).json()
    assert stats["totalRequests"] == 1
    assert stats["pendingRequests"] == 1
    assert stats["byChain"] == {"ethereum": 1}

    pools = (await api_client.get("/api/v1/faucet/pools")).json()
    assert {pool["chain"] for pool in pools} == {"ethereum", "polygon", "sui"}


async def test_admin_listing_requires_admin(api_client, login, monkeypatch):
    headers, _ = await login()
    assert (await api_client.get("/api/v1/faucet/admin/requests", headers=headers)).status_code == 403

    admin = Account.create()
    monkeypatch.setattr(settings, "ADMIN_ADDRESSES", [admin.address])
    admin_headers, _ = await login(admin)
    await request_faucet(api_client, headers)

    response = await api_client.get("/api/v1/faucet/admin/requests", headers=admin_headers, params={"chain": "ethereum"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["walletAddress"]
