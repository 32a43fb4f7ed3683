import pytest

from nft_inventory.errors import EnumerationUnsupported, RpcError
from nft_inventory.rpc import balance_of, enumerate_owned_tokens
from nft_inventory.rpc.erc721 import token_of_owner_by_index

from tests.fakes import OTHER, WALLET, FakeChainProvider, FakeContract


CONTRACT = "0x" + "11" * 20


def chain_with(contract: FakeContract) -> FakeChainProvider:
    return FakeChainProvider(contracts={CONTRACT: contract})


async def test_balance_of_reads_uint256():
    provider = chain_with(FakeContract(balances={WALLET: 3}))
    assert await balance_of(provider, CONTRACT, WALLET) == 3
    assert await balance_of(provider, CONTRACT, OTHER) == 0


async def test_enumeration_returns_exactly_balance_ids_in_index_order():
    provider = chain_with(FakeContract(balances={WALLET: 2}, tokens={WALLET: [9, 5]}))

    result = await enumerate_owned_tokens(provider, CONTRACT, WALLET)

    assert result.enumerable
    assert result.balance == 2
    assert result.token_ids == ["9", "5"]
    assert len(result.token_ids) == result.balance


async def test_zero_balance_makes_no_index_calls():
    provider = chain_with(FakeContract())

    result = await enumerate_owned_tokens(provider, CONTRACT, WALLET)

    assert result.balance == 0
    assert result.token_ids == []
    assert "tokenOfOwnerByIndex" not in provider.calls


async def test_non_enumerable_contract_reports_unsupported():
    provider = chain_with(FakeContract(balances={WALLET: 2}, enumerable=False))

    result = await enumerate_owned_tokens(provider, CONTRACT, WALLET)

    assert not result.enumerable
    assert result.balance == 2
    assert result.token_ids == []


async def test_failure_midway_discards_partial_list():
    provider = chain_with(FakeContract(balances={WALLET: 3}, tokens={WALLET: [1, 2, 3]}, fail_index=1))

    result = await enumerate_owned_tokens(provider, CONTRACT, WALLET)

    assert not result.enumerable
    assert result.token_ids == []
    assert provider.calls.count("tokenOfOwnerByIndex") == 2


async def test_balance_failure_propagates():
    provider = chain_with(FakeContract(fail_balance=True))
    with pytest.raises(RpcError):
        await enumerate_owned_tokens(provider, CONTRACT, WALLET)


async def test_token_of_owner_by_index_wraps_revert():
    provider = chain_with(FakeContract(balances={WALLET: 1}, enumerable=False))
    with pytest.raises(EnumerationUnsupported, match="tokenOfOwnerByIndex\\(0\\)"):
        await token_of_owner_by_index(provider, CONTRACT, WALLET, 0)


async def test_balance_above_cap_is_not_enumerated():
    provider = chain_with(FakeContract(balances={WALLET: 5000}, tokens={WALLET: list(range(5000))}))

    result = await enumerate_owned_tokens(provider, CONTRACT, WALLET, max_tokens=1000)

    assert not result.enumerable
    assert result.balance == 5000
    assert result.token_ids == []
    assert "tokenOfOwnerByIndex" not in provider.calls
