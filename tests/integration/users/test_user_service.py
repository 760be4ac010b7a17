import pytest

from faucetswap.core.exceptions.base import BadRequestError
from faucetswap.core.exceptions.handler import ServiceErrorCode
from faucetswap.core.service.users.user_service import UserService, is_sui_address

LOGIN = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
SUI_ADDRESS = "0x" + "ab" * 32


@pytest.fixture
async def user(repositories):
    return await repositories["users"].get_or_create_user(LOGIN)


@pytest.fixture
def user_service(repositories, chain_manager):
    return UserService(repositories["users"], chain_manager)


async def test_link_evm_and_sui_wallets(user_service, user):
    updated = await user_service.add_wallet(user, "polygon", "0x8BA1F109551BD432803012645AC136DDD64DBA72")
    updated = await user_service.add_wallet(updated, "sui", SUI_ADDRESS)

    wallets = {wallet.chain: wallet.address for wallet in updated.wallets}
    assert wallets == {
        "polygon": "0x8ba1f109551bd432803012645ac136ddd64dba72",
        "sui": SUI_ADDRESS,
    }
    assert updated.address_for_chain("sui") == SUI_ADDRESS
    assert updated.address_for_chain("ethereum") == LOGIN


async def test_relinking_replaces_wallet(user_service, user):
    await user_service.add_wallet(user, "polygon", "0x8ba1f109551bd432803012645ac136ddd64dba72")
    updated = await user_service.add_wallet(user, "polygon", "0x0000000000000000000000000000000000000001")

    assert len(updated.wallets) == 1
    assert updated.address_for_chain("polygon") == "0x0000000000000000000000000000000000000001"


async def test_unsupported_chain(user_service, user):
    with pytest.raises(BadRequestError) as exc_info:
        await user_service.add_wallet(user, "solana", SUI_ADDRESS)
    assert exc_info.value.code == ServiceErrorCode.UNSUPPORTED_CHAIN


async def test_address_must_match_chain_type(user_service, user):
    # 32-byte Sui address is not an EVM address
    with pytest.raises(BadRequestError) as exc_info:
        await user_service.add_wallet(user, "ethereum", SUI_ADDRESS)
    assert exc_info.value.code == ServiceErrorCode.INVALID_ADDRESS
    assert exc_info.value.message == "Invalid evm address"

    with pytest.raises(BadRequestError):
        await user_service.add_wallet(user, "sui", "sui-wallet")


@pytest.mark.parametrize("address,expected", [
    (SUI_ADDRESS, True),
    ("0x2", True),
    ("0x" + "a" * 65, False),
    ("0x", False),
    ("ab" * 32, False),
    ("0xnothex", False),
])
def test_is_sui_address(address, expected):
    assert is_sui_address(address) is expected
