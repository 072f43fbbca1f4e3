import eth_abi.abi
import pytest
from eth_utils.crypto import keccak
from web3.exceptions import ContractLogicError

from tickswap.erc20 import Erc20Token, EtherPlaceholder
from tickswap.exceptions import TickswapValueError

MKR = "0x9f8F72aA9304c8B593d555F12eF6589cC3A579A2"


class FakeTokenEth:
    """
    Serves a token contract that reverts for the lowercase metadata functions, and returns the
    metadata from the uppercase variants.
    """

    def __init__(self, code: bytes) -> None:
        self.code = code
        self.responses = {
            keccak(text="NAME()")[:4]: eth_abi.abi.encode(["string"], ["Maker"]),
            keccak(text="symbol()")[:4]: eth_abi.abi.encode(["string"], ["MKR"]),
            keccak(text="DECIMALS()")[:4]: eth_abi.abi.encode(["uint8"], [18]),
        }

    @property
    async def chain_id(self) -> int:
        return 1

    async def get_code(self, address: str) -> bytes:
        return self.code

    async def call(self, transaction, block_identifier=None) -> bytes:
        try:
            return self.responses[bytes(transaction["data"])]
        except KeyError:
            raise ContractLogicError("execution reverted") from None


class FakeTokenWeb3:
    def __init__(self, code: bytes = b"\x60\x80") -> None:
        self.eth = FakeTokenEth(code)


def test_erc20_token_checksums_address():
    token = Erc20Token(address=MKR.lower())  # type: ignore[arg-type]
    assert token.address == MKR
    assert str(token) == "UNKN"
    assert not token.is_native


def test_erc20_token_rejects_negative_decimals():
    with pytest.raises(TickswapValueError):
        Erc20Token(address=MKR, decimals=-1)  # type: ignore[arg-type]


def test_ether_placeholder():
    ether = EtherPlaceholder()
    assert ether.is_native
    assert ether.decimals == 18
    assert str(ether) == "ETH"


async def test_erc20_token_from_chain():
    token = await Erc20Token.from_chain(
        w3=FakeTokenWeb3(),  # type: ignore[arg-type]
        address=MKR.lower(),
    )
    assert token.address == MKR
    assert token.name == "Maker"
    assert token.symbol == "MKR"
    assert token.decimals == 18
    assert token.chain_id == 1


async def test_erc20_token_from_chain_native_currency():
    token = await Erc20Token.from_chain(
        w3=FakeTokenWeb3(),  # type: ignore[arg-type]
        address="0x0000000000000000000000000000000000000000",
        chain_id=8453,
    )
    assert isinstance(token, EtherPlaceholder)
    assert token.chain_id == 8453


async def test_erc20_token_from_chain_without_contract():
    with pytest.raises(TickswapValueError, match="No contract"):
        await Erc20Token.from_chain(
            w3=FakeTokenWeb3(code=b""),  # type: ignore[arg-type]
            address=MKR,
        )
