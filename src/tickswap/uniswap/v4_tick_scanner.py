"""
Discovery of usable liquidity near the current price of a Uniswap V4 pool.

Only ticks that have been touched by a liquidity provider hold state, so the scanner reads a small
window of ticks around the current price instead of the full tick range. Liquidity that begins
outside of the window is not found.
"""

from collections.abc import Iterable

from hexbytes import HexBytes

from tickswap.constants import TICK_WINDOW_RADIUS
from tickswap.exceptions import PoolStateUnavailable
from tickswap.logging import logger
from tickswap.types.aliases import Tick
from tickswap.uniswap.v4_functions import tick_window
from tickswap.uniswap.v4_state_view import PoolStateReader
from tickswap.uniswap.v4_types import (
    LiquidityGross,
    SelectedTick,
    TickInfo,
    TickReadError,
    TickScanResult,
)


def select_tick(candidates: Iterable[tuple[Tick, TickInfo]]) -> SelectedTick | None:
    """
    Select the candidate with the greatest gross liquidity. Ticks without liquidity are never
    selected, and ties keep the earliest candidate.
    """

    selected: SelectedTick | None = None
    for tick, info in candidates:
        if info.liquidity_gross <= 0:
            continue
        if selected is None or info.liquidity_gross > selected.info.liquidity_gross:
            selected = SelectedTick(tick=tick, info=info)
    return selected


async def scan_tick_liquidity(
    reader: PoolStateReader,
    pool_id: bytes,
    tick_spacing: int,
    radius: int = TICK_WINDOW_RADIUS,
) -> TickScanResult:
    """
    Read the current pool state and the ticks within `radius` tick spacings of the current tick,
    and select the tick with the most liquidity.

    A failure to read an individual tick is recorded in the result and does not stop the scan. A
    window without liquidity gives a result with no selected tick.
    """

    pool_id = HexBytes(pool_id)

    try:
        slot0 = await reader.get_slot0(pool_id)
    except Exception as exc:
        raise PoolStateUnavailable(pool_id=pool_id) from exc

    window = tick_window(slot0.tick, tick_spacing, radius)
    logger.debug(f"Scanning ticks {window} around current tick {slot0.tick}")

    candidates: list[tuple[Tick, TickInfo]] = []
    errors: list[TickReadError] = []
    for tick in window:
        try:
            info = await reader.get_tick_info(pool_id, tick)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"Could not read tick {tick}: {exc}")
            errors.append(TickReadError(tick=tick, error=exc))
            continue
        candidates.append((tick, info))

    selected = select_tick(candidates)
    if selected is None:
        logger.info(f"No liquidity found in the ticks around current tick {slot0.tick}")
    else:
        logger.debug(
            f"Selected tick {selected.tick} with gross liquidity {selected.info.liquidity_gross}"
        )

    liquidity: dict[Tick, LiquidityGross] = {
        tick: info.liquidity_gross for tick, info in candidates
    }
    return TickScanResult(
        slot0=slot0,
        window=window,
        selected=selected,
        errors=tuple(errors),
        liquidity=liquidity,
    )
