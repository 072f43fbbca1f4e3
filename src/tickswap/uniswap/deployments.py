from dataclasses import dataclass

import eth_typing
from eth_typing import ChecksumAddress

from tickswap.checksum_cache import get_checksum_address
from tickswap.exceptions import TickswapValueError
from tickswap.types.aliases import ChainId


@dataclass(slots=True, frozen=True)
class UniswapPoolManagerDeployment:
    address: ChecksumAddress


@dataclass(slots=True, frozen=True)
class UniswapStateViewDeployment:
    address: ChecksumAddress


@dataclass(slots=True, frozen=True)
class UniversalRouterDeployment:
    address: ChecksumAddress


@dataclass(slots=True, frozen=True)
class Permit2Deployment:
    address: ChecksumAddress


@dataclass(slots=True, frozen=True)
class UniswapV4ExchangeDeployment:
    name: str
    chain_id: ChainId
    pool_manager: UniswapPoolManagerDeployment
    state_view: UniswapStateViewDeployment
    universal_router: UniversalRouterDeployment
    permit2: Permit2Deployment


# Permit2 is deployed at the same address on every chain
PERMIT2 = Permit2Deployment(
    address=get_checksum_address("0x000000000022D473030F116dDEE9F6B43aC78BA3"),
)


EthereumMainnetUniswapV4 = UniswapV4ExchangeDeployment(
    name="Ethereum Mainnet Uniswap V4",
    chain_id=eth_typing.ChainId.ETH,
    pool_manager=UniswapPoolManagerDeployment(
        address=get_checksum_address("0x000000000004444c5dc75cB358380D2e3dE08A90"),
    ),
    state_view=UniswapStateViewDeployment(
        address=get_checksum_address("0x7fFE42C4a5DEeA5b0feC41C94C136Cf115597227")
    ),
    universal_router=UniversalRouterDeployment(
        address=get_checksum_address("0x66a9893cC07D91D95644AEDD05D03f95e1dBA8Af")
    ),
    permit2=PERMIT2,
)
BaseUniswapV4 = UniswapV4ExchangeDeployment(
    name="Base Uniswap V4",
    chain_id=eth_typing.ChainId.BASE,
    pool_manager=UniswapPoolManagerDeployment(
        address=get_checksum_address("0x498581fF718922c3f8e6A244956aF099B2652b2b"),
    ),
    state_view=UniswapStateViewDeployment(
        address=get_checksum_address("0xA3c0c9b65baD0b08107Aa264b0f3dB444b867A71")
    ),
    universal_router=UniversalRouterDeployment(
        address=get_checksum_address("0x6fF5693b99212Da76ad316178A184AB56D299b43")
    ),
    permit2=PERMIT2,
)


V4_DEPLOYMENTS: dict[ChainId, UniswapV4ExchangeDeployment] = {
    EthereumMainnetUniswapV4.chain_id: EthereumMainnetUniswapV4,
    BaseUniswapV4.chain_id: BaseUniswapV4,
}


def get_v4_deployment(chain_id: ChainId) -> UniswapV4ExchangeDeployment:
    try:
        return V4_DEPLOYMENTS[chain_id]
    except KeyError:
        raise TickswapValueError(
            message=f"No Uniswap V4 deployment is known for chain ID {chain_id}."
        ) from None
