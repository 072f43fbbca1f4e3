"""
Off-chain Permit2 authorization for spending the input token of a swap.

The owner signs an EIP-712 `PermitSingle` message granting the Universal Router an allowance through
the Permit2 contract. The router consumes the signed message with its PERMIT2_PERMIT command before
the swap, so no separate approval transaction is needed. The owner must have approved Permit2 to
spend the token.

ref: https://github.com/Uniswap/permit2/blob/main/src/interfaces/IAllowanceTransfer.sol
"""

import dataclasses
import time
from typing import Any, cast

import eth_abi.abi
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3

from tickswap.checksum_cache import get_checksum_address
from tickswap.constants import MAX_UINT48, MAX_UINT160, PERMIT_DEADLINE_SECONDS
from tickswap.exceptions import PermitSigningRejected, TickswapValueError
from tickswap.functions import encode_function_calldata, raw_call_async
from tickswap.logging import logger
from tickswap.signer import Signer
from tickswap.types.aliases import ChainId

PERMIT_SINGLE_ABI_TYPE = "((address,uint160,uint48,uint48),address,uint256)"

PERMIT_SINGLE_TYPES: dict[str, list[dict[str, str]]] = {
    "PermitSingle": [
        {"name": "details", "type": "PermitDetails"},
        {"name": "spender", "type": "address"},
        {"name": "sigDeadline", "type": "uint256"},
    ],
    "PermitDetails": [
        {"name": "token", "type": "address"},
        {"name": "amount", "type": "uint160"},
        {"name": "expiration", "type": "uint48"},
        {"name": "nonce", "type": "uint48"},
    ],
}


@dataclasses.dataclass(slots=True, frozen=True)
class PermitDetails:
    token: ChecksumAddress
    amount: int
    expiration: int
    nonce: int


@dataclasses.dataclass(slots=True, frozen=True)
class PermitSingle:
    details: PermitDetails
    spender: ChecksumAddress
    sig_deadline: int

    def as_abi_tuple(self) -> tuple[Any, ...]:
        return (
            (
                self.details.token,
                self.details.amount,
                self.details.expiration,
                self.details.nonce,
            ),
            self.spender,
            self.sig_deadline,
        )

    def as_message(self) -> dict[str, Any]:
        return {
            "details": {
                "token": self.details.token,
                "amount": self.details.amount,
                "expiration": self.details.expiration,
                "nonce": self.details.nonce,
            },
            "spender": self.spender,
            "sigDeadline": self.sig_deadline,
        }


@dataclasses.dataclass(slots=True, frozen=True)
class EncodedPermit:
    """
    A signed permit and its ABI encoding, the input of the router's PERMIT2_PERMIT command.
    """

    permit: PermitSingle
    owner: ChecksumAddress
    signature: HexBytes
    data: HexBytes


async def fetch_permit2_nonce(
    w3: AsyncWeb3[AsyncBaseProvider],
    permit2: ChecksumAddress,
    owner: str,
    token: str,
    spender: str,
) -> int:
    """
    Get the nonce of the next permit for this owner, token and spender.
    """

    _, _, nonce = cast(
        "tuple[int, int, int]",
        await raw_call_async(
            w3=w3,
            address=permit2,
            calldata=encode_function_calldata(
                function_prototype="allowance(address,address,address)",
                function_arguments=[
                    get_checksum_address(owner),
                    get_checksum_address(token),
                    get_checksum_address(spender),
                ],
            ),
            return_types=["uint160", "uint48", "uint48"],
        ),
    )
    return nonce


def build_permit(
    token: str,
    amount: int,
    spender: str,
    nonce: int,
    *,
    now: int | None = None,
    deadline_seconds: int = PERMIT_DEADLINE_SECONDS,
) -> PermitSingle:
    """
    Build a permit for `amount` of `token`. The allowance expiration and the signature deadline are
    both `deadline_seconds` after `now`.
    """

    if not 0 < amount <= MAX_UINT160:
        raise TickswapValueError(message=f"Permit amount {amount} is outside of the uint160 range")
    if not 0 <= nonce <= MAX_UINT48:
        raise TickswapValueError(message=f"Permit nonce {nonce} is outside of the uint48 range")

    if now is None:
        now = int(time.time())
    deadline = now + deadline_seconds

    return PermitSingle(
        details=PermitDetails(
            token=get_checksum_address(token),
            amount=amount,
            expiration=deadline,
            nonce=nonce,
        ),
        spender=get_checksum_address(spender),
        sig_deadline=deadline,
    )


def permit_typed_data(
    permit: PermitSingle,
    chain_id: ChainId,
    permit2: str,
) -> tuple[dict[str, Any], dict[str, list[dict[str, str]]], dict[str, Any]]:
    """
    Get the EIP-712 domain, types and message for the permit.
    """

    domain = {
        "name": "Permit2",
        "chainId": chain_id,
        "verifyingContract": get_checksum_address(permit2),
    }
    return domain, PERMIT_SINGLE_TYPES, permit.as_message()


def encode_permit(permit: PermitSingle, signature: bytes) -> HexBytes:
    return HexBytes(
        eth_abi.abi.encode(
            types=[PERMIT_SINGLE_ABI_TYPE, "bytes"],
            args=[permit.as_abi_tuple(), bytes(signature)],
        )
    )


async def authorize_permit(
    *,
    w3: AsyncWeb3[AsyncBaseProvider],
    signer: Signer,
    permit2: ChecksumAddress,
    token: str,
    amount: int,
    spender: str,
    chain_id: ChainId,
    deadline_seconds: int = PERMIT_DEADLINE_SECONDS,
) -> EncodedPermit:
    """
    Build a permit for the signer's tokens, have the signer sign it, and encode it for the router.

    Raises `PermitSigningRejected` if the permit cannot be signed.
    """

    owner = signer.address

    try:
        nonce = await fetch_permit2_nonce(
            w3=w3,
            permit2=permit2,
            owner=owner,
            token=token,
            spender=spender,
        )
    except Exception as exc:
        raise PermitSigningRejected(reason=f"could not read the Permit2 nonce ({exc})") from exc

    permit = build_permit(
        token=token,
        amount=amount,
        spender=spender,
        nonce=nonce,
        deadline_seconds=deadline_seconds,
    )
    domain, types, message = permit_typed_data(permit=permit, chain_id=chain_id, permit2=permit2)

    logger.info(f"Requesting Permit2 signature for {amount} of {permit.details.token}")
    try:
        signature = await signer.sign_typed_data(domain=domain, types=types, message=message)
    except Exception as exc:
        raise PermitSigningRejected(reason=str(exc) or exc.__class__.__name__) from exc

    return EncodedPermit(
        permit=permit,
        owner=owner,
        signature=HexBytes(signature),
        data=encode_permit(permit, signature),
    )
