import dataclasses
from enum import Enum

from eth_typing import ChecksumAddress

from tickswap.types.aliases import Tick

type Liquidity = int
type LiquidityGross = int
type LiquidityNet = int
type Pip = int
type SqrtPriceX96 = int


class Hooks(Enum):
    # Permission flags encoded in the least significant bits of the hook address
    # ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/Hooks.sol
    BEFORE_INITIALIZE = 1 << 13
    AFTER_INITIALIZE = 1 << 12
    BEFORE_ADD_LIQUIDITY = 1 << 11
    AFTER_ADD_LIQUIDITY = 1 << 10
    BEFORE_REMOVE_LIQUIDITY = 1 << 9
    AFTER_REMOVE_LIQUIDITY = 1 << 8
    BEFORE_SWAP = 1 << 7
    AFTER_SWAP = 1 << 6
    BEFORE_DONATE = 1 << 5
    AFTER_DONATE = 1 << 4
    BEFORE_SWAP_RETURNS_DELTA = 1 << 3
    AFTER_SWAP_RETURNS_DELTA = 1 << 2
    AFTER_ADD_LIQUIDITY_RETURNS_DELTA = 1 << 1
    AFTER_REMOVE_LIQUIDITY_RETURNS_DELTA = 1 << 0


SWAP_HOOKS = frozenset(
    {
        Hooks.BEFORE_SWAP,
        Hooks.AFTER_SWAP,
        Hooks.BEFORE_SWAP_RETURNS_DELTA,
        Hooks.AFTER_SWAP_RETURNS_DELTA,
    }
)


def active_hooks(hook_address: str) -> frozenset[Hooks]:
    return frozenset(hook for hook in Hooks if int(hook_address, 16) & hook.value != 0)


@dataclasses.dataclass(slots=True, frozen=True)
class UniswapV4PoolKey:
    currency0: ChecksumAddress
    currency1: ChecksumAddress
    fee: Pip
    tick_spacing: int
    hooks: ChecksumAddress


@dataclasses.dataclass(slots=True, frozen=True)
class ProtocolFee:
    zero_for_one: int
    one_for_zero: int

    @classmethod
    def from_packed(cls, protocol_fee: int) -> "ProtocolFee":
        # Two uint12 fees are close-packed into a uint24
        # ref: https://github.com/Uniswap/v4-core/blob/main/src/libraries/ProtocolFeeLibrary.sol
        return cls(
            zero_for_one=protocol_fee & 0xFFF,
            one_for_zero=protocol_fee >> 12,
        )


@dataclasses.dataclass(slots=True, frozen=True)
class Slot0:
    sqrt_price_x96: SqrtPriceX96
    tick: Tick
    protocol_fee: ProtocolFee
    lp_fee: Pip


@dataclasses.dataclass(slots=True, frozen=True)
class TickInfo:
    liquidity_gross: LiquidityGross
    liquidity_net: LiquidityNet
    fee_growth_outside0_x128: int
    fee_growth_outside1_x128: int

    @property
    def is_initialized(self) -> bool:
        return self.liquidity_gross != 0


@dataclasses.dataclass(slots=True, frozen=True)
class SelectedTick:
    tick: Tick
    info: TickInfo


@dataclasses.dataclass(slots=True, frozen=True)
class TickReadError:
    tick: Tick
    error: Exception


@dataclasses.dataclass(slots=True, frozen=True)
class TickScanResult:
    slot0: Slot0
    window: tuple[Tick, ...]
    selected: SelectedTick | None
    errors: tuple[TickReadError, ...]
    liquidity: dict[Tick, LiquidityGross] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass(slots=True, frozen=True)
class TickDelta:
    tick: Tick
    liquidity_net: LiquidityNet


@dataclasses.dataclass(slots=True, frozen=True)
class SwapDelta:
    currency0: int
    currency1: int

    @property
    def amount_in(self) -> int:
        "The deposited token amount."
        return -min(self.currency0, self.currency1)

    @property
    def amount_out(self) -> int:
        "The withdrawn token amount."
        return max(self.currency0, self.currency1)
