"""
Orchestration of a single swap attempt through a Uniswap V4 pool.

An attempt moves through a linear sequence of stages, and ends in SUCCEEDED or FAILED, or in
SUBMITTED when the transaction was sent but its confirmation is still pending. Every failure is
captured in the returned `SwapResult` with a human readable status, so callers do not need to
handle exceptions.
"""

import dataclasses
import time
from collections.abc import Callable
from enum import Enum, auto
from typing import Any

from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.types import TxReceipt

from tickswap import config
from tickswap.amounts import format_units, parse_units
from tickswap.config import SwapSettings
from tickswap.erc20 import Erc20Token
from tickswap.exceptions import (
    InvalidAmount,
    InvalidStageTransition,
    MissingSigningProvider,
    NoLiquidityFound,
    SwapAlreadyRunning,
    TickswapError,
)
from tickswap.logging import logger
from tickswap.permit2 import EncodedPermit, authorize_permit
from tickswap.signer import Signer
from tickswap.transaction import (
    SubmissionStatus,
    SwapTransaction,
    assemble_swap_transaction,
    confirm_transaction,
    submit_transaction,
)
from tickswap.uniswap.deployments import UniswapV4ExchangeDeployment
from tickswap.uniswap.v4_functions import build_pool_key, generate_v4_pool_id
from tickswap.uniswap.v4_pool_model import build_pool_model
from tickswap.uniswap.v4_state_view import PoolStateReader, UniswapV4StateView
from tickswap.uniswap.v4_tick_scanner import scan_tick_liquidity
from tickswap.uniswap.v4_trade import Trade, build_exact_input_trade
from tickswap.uniswap.v4_types import TickScanResult

SWAP_SUCCESSFUL = "Swap successful."
CONFIRMATION_PENDING = "confirmation pending"

type StatusCallback = Callable[[str], Any]


class SwapStage(Enum):
    IDLE = auto()
    SCANNING = auto()
    BUILDING_MODEL = auto()
    SIMULATING = auto()
    AUTHORIZING = auto()
    ASSEMBLING = auto()
    SUBMITTING = auto()
    SUCCEEDED = auto()
    SUBMITTED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in {SwapStage.SUCCEEDED, SwapStage.SUBMITTED, SwapStage.FAILED}


_TRANSITIONS: dict[SwapStage, frozenset[SwapStage]] = {
    SwapStage.IDLE: frozenset({SwapStage.SCANNING, SwapStage.FAILED}),
    SwapStage.SCANNING: frozenset({SwapStage.BUILDING_MODEL, SwapStage.FAILED}),
    SwapStage.BUILDING_MODEL: frozenset({SwapStage.SIMULATING, SwapStage.FAILED}),
    SwapStage.SIMULATING: frozenset(
        {SwapStage.AUTHORIZING, SwapStage.ASSEMBLING, SwapStage.FAILED}
    ),
    SwapStage.AUTHORIZING: frozenset({SwapStage.ASSEMBLING, SwapStage.FAILED}),
    SwapStage.ASSEMBLING: frozenset({SwapStage.SUBMITTING, SwapStage.FAILED}),
    SwapStage.SUBMITTING: frozenset(
        {SwapStage.SUCCEEDED, SwapStage.SUBMITTED, SwapStage.FAILED}
    ),
    SwapStage.SUCCEEDED: frozenset(),
    SwapStage.SUBMITTED: frozenset(),
    SwapStage.FAILED: frozenset(),
}


def check_transition(current: SwapStage, requested: SwapStage) -> None:
    if requested not in _TRANSITIONS[current]:
        raise InvalidStageTransition(current=current, requested=requested)


@dataclasses.dataclass(slots=True, frozen=True)
class SwapResult:
    stage: SwapStage
    status: str
    error: Exception | None = None
    failed_stage: SwapStage | None = None
    scan: TickScanResult | None = None
    trade: Trade | None = None
    permit: EncodedPermit | None = None
    transaction: SwapTransaction | None = None
    transaction_hash: HexBytes | None = None
    receipt: TxReceipt | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage is SwapStage.SUCCEEDED

    @property
    def pending(self) -> bool:
        return self.stage is SwapStage.SUBMITTED


@dataclasses.dataclass(slots=True)
class _SwapAttempt:
    stage: SwapStage = SwapStage.IDLE
    scan: TickScanResult | None = None
    trade: Trade | None = None
    permit: EncodedPermit | None = None
    transaction: SwapTransaction | None = None
    transaction_hash: HexBytes | None = None
    receipt: TxReceipt | None = None

    def advance(self, stage: SwapStage) -> None:
        check_transition(self.stage, stage)
        logger.debug(f"Swap stage {self.stage.name} -> {stage.name}")
        self.stage = stage

    def result(
        self,
        status: str,
        error: Exception | None = None,
        *,
        confirmed: bool = True,
    ) -> SwapResult:
        failed_stage = None
        if error is not None:
            failed_stage = self.stage
            self.advance(SwapStage.FAILED)
        elif confirmed:
            self.advance(SwapStage.SUCCEEDED)
        else:
            self.advance(SwapStage.SUBMITTED)

        return SwapResult(
            stage=self.stage,
            status=status,
            error=error,
            failed_stage=failed_stage,
            scan=self.scan,
            trade=self.trade,
            permit=self.permit,
            transaction=self.transaction,
            transaction_hash=self.transaction_hash,
            receipt=self.receipt,
        )


async def _run_pipeline(
    attempt: _SwapAttempt,
    *,
    w3: AsyncWeb3[AsyncBaseProvider],
    signer: Signer | None,
    deployment: UniswapV4ExchangeDeployment,
    token_in: Erc20Token,
    token_out: Erc20Token,
    amount: str,
    recipient: str | None,
    settings: SwapSettings,
    state_reader: PoolStateReader,
    on_status: StatusCallback | None,
) -> bool:
    """
    Run every stage of the attempt. Returns True if the transaction was confirmed, or False if it
    was sent but no receipt was obtained.
    """

    if signer is None:
        raise MissingSigningProvider

    amount_in = parse_units(amount, token_in.decimals)
    if amount_in == 0:
        raise InvalidAmount(value=amount, reason="the amount must be greater than zero")
    logger.info(
        f"Swapping {format_units(amount_in, token_in.decimals)} {token_in} for {token_out} "
        f"on {deployment.name}"
    )

    attempt.advance(SwapStage.SCANNING)
    pool_key = build_pool_key(
        token_in.address,
        token_out.address,
        fee=settings.fee,
        tick_spacing=settings.tick_spacing,
        hooks=settings.hook_address,
    )
    pool_id = generate_v4_pool_id(pool_key)
    logger.debug(f"Pool ID {pool_id.to_0x_hex()}")
    attempt.scan = await scan_tick_liquidity(
        state_reader,
        pool_id,
        tick_spacing=pool_key.tick_spacing,
        radius=settings.tick_window_radius,
    )
    if attempt.scan.selected is None:
        raise NoLiquidityFound

    attempt.advance(SwapStage.BUILDING_MODEL)
    pool = build_pool_model(
        attempt.scan.slot0,
        attempt.scan.selected,
        pool_key,
        tokens=(token_in, token_out),
    )

    attempt.advance(SwapStage.SIMULATING)
    attempt.trade = build_exact_input_trade(pool, token_in, amount_in)

    if not token_in.is_native:
        attempt.advance(SwapStage.AUTHORIZING)
        attempt.permit = await authorize_permit(
            w3=w3,
            signer=signer,
            permit2=deployment.permit2.address,
            token=token_in.address,
            amount=amount_in,
            spender=deployment.universal_router.address,
            chain_id=deployment.chain_id,
            deadline_seconds=settings.permit_deadline_seconds,
        )

    attempt.advance(SwapStage.ASSEMBLING)
    attempt.transaction = assemble_swap_transaction(
        attempt.trade,
        router=deployment.universal_router.address,
        sender=signer.address,
        deadline=int(time.time()) + settings.permit_deadline_seconds,
        recipient=recipient,
        slippage_bps=settings.slippage_bps,
        permit=attempt.permit,
        gas_limit=settings.gas_limit,
        native_value_buffer=settings.native_value_buffer,
    )

    attempt.advance(SwapStage.SUBMITTING)
    submitted = await submit_transaction(signer, attempt.transaction)
    if submitted.status is SubmissionStatus.FAILED:
        assert submitted.error is not None
        raise submitted.error

    assert submitted.transaction_hash is not None
    attempt.transaction_hash = submitted.transaction_hash
    if on_status is not None:
        on_status(f"Transaction submitted: {attempt.transaction_hash.to_0x_hex()}")

    confirmed = await confirm_transaction(signer, attempt.transaction_hash)
    attempt.receipt = confirmed.receipt
    if confirmed.status is SubmissionStatus.FAILED:
        assert confirmed.error is not None
        raise confirmed.error

    return confirmed.status is SubmissionStatus.CONFIRMED


async def execute_swap(
    *,
    w3: AsyncWeb3[AsyncBaseProvider],
    signer: Signer | None,
    deployment: UniswapV4ExchangeDeployment,
    token_in: Erc20Token,
    token_out: Erc20Token,
    amount: str,
    recipient: str | None = None,
    settings: SwapSettings | None = None,
    state_reader: PoolStateReader | None = None,
    on_status: StatusCallback | None = None,
) -> SwapResult:
    """
    Swap `amount` (a decimal string) of `token_in` for `token_out` through the Uniswap V4 pool
    configured by `settings`, and wait for the transaction to be confirmed. Without `settings`, the
    `[swap]` table of the configuration file is used on the deployment's chain.

    The pool state is read through the deployment's StateView contract unless another
    `state_reader` is given. Token input is authorized with a Permit2 signature. The output is sent
    to `recipient`, or to the signer if not given.

    The returned result holds the final stage, a status message, and everything built before the
    attempt ended. Exceptions raised during the attempt are not propagated.
    """

    if settings is None:
        settings = config.settings.swap.model_copy(update={"chain_id": deployment.chain_id})
    if state_reader is None:
        state_reader = UniswapV4StateView(w3=w3, address=deployment.state_view.address)

    attempt = _SwapAttempt()
    try:
        confirmed = await _run_pipeline(
            attempt,
            w3=w3,
            signer=signer,
            deployment=deployment,
            token_in=token_in,
            token_out=token_out,
            amount=amount,
            recipient=recipient,
            settings=settings,
            state_reader=state_reader,
            on_status=on_status,
        )
    except TickswapError as exc:
        result = attempt.result(status=exc.message or str(exc), error=exc)
    except Exception as exc:
        logger.exception(f"Unexpected error during swap stage {attempt.stage.name}")
        result = attempt.result(status=f"Swap failed: {exc}", error=exc)
    else:
        if confirmed:
            result = attempt.result(status=SWAP_SUCCESSFUL)
        else:
            assert attempt.transaction_hash is not None
            result = attempt.result(
                status=(
                    f"Transaction submitted: {attempt.transaction_hash.to_0x_hex()}, "
                    f"{CONFIRMATION_PENDING}"
                ),
                confirmed=False,
            )

    if result.succeeded or result.pending:
        logger.info(result.status)
    else:
        assert result.failed_stage is not None
        logger.info(f"Swap failed during {result.failed_stage.name}: {result.status}")

    if on_status is not None:
        on_status(result.status)
    return result


class SessionStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"


class SwapSession:
    """
    Runs swap attempts for one user, at most one at a time. The status moves from IDLE to RUNNING
    when an attempt starts, to SUCCESS, FAILURE, or PENDING when the transaction was sent without a
    receipt, and back to IDLE on `reset`.
    """

    def __init__(self) -> None:
        self.status = SessionStatus.IDLE
        self.last_result: SwapResult | None = None

    @property
    def is_running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    def reset(self) -> None:
        if not self.is_running:
            self.status = SessionStatus.IDLE

    async def run(self, **kwargs: Any) -> SwapResult:
        """
        Run `execute_swap` with the given keyword arguments. A call made while an attempt is
        running fails immediately without starting another attempt.
        """

        if self.is_running:
            error = SwapAlreadyRunning()
            assert error.message is not None
            logger.info(error.message)
            return SwapResult(stage=SwapStage.FAILED, status=error.message, error=error)

        self.status = SessionStatus.RUNNING
        try:
            result = await execute_swap(**kwargs)
        except BaseException:
            self.status = SessionStatus.FAILURE
            raise

        if result.succeeded:
            self.status = SessionStatus.SUCCESS
        elif result.pending:
            self.status = SessionStatus.PENDING
        else:
            self.status = SessionStatus.FAILURE
        self.last_result = result
        return result
