import dataclasses
from enum import Enum

from hexbytes import HexBytes
from web3.types import TxReceipt

from tickswap.exceptions import SubmissionError
from tickswap.logging import logger
from tickswap.signer import DEFAULT_RECEIPT_TIMEOUT_SECONDS, Signer
from tickswap.transaction.swap_transaction import SwapTransaction


class SubmissionStatus(Enum):
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclasses.dataclass(slots=True, frozen=True)
class SubmissionResult:
    status: SubmissionStatus
    transaction_hash: HexBytes | None = None
    receipt: TxReceipt | None = None
    error: SubmissionError | None = None


async def submit_transaction(signer: Signer, transaction: SwapTransaction) -> SubmissionResult:
    """
    Send the transaction. The result is SUBMITTED with the transaction hash, or FAILED if the
    transaction could not be sent. Failed transactions are not retried.
    """

    try:
        tx_hash = HexBytes(await signer.send_transaction(transaction.as_tx_params()))
    except Exception as exc:  # noqa: BLE001
        error = SubmissionError(reason=str(exc) or exc.__class__.__name__)
        error.__cause__ = exc
        logger.info(f"Sending the transaction failed: {error.reason}")
        return SubmissionResult(status=SubmissionStatus.FAILED, error=error)

    logger.info(f"Transaction submitted: {tx_hash.to_0x_hex()}")
    return SubmissionResult(status=SubmissionStatus.SUBMITTED, transaction_hash=tx_hash)


async def confirm_transaction(
    signer: Signer,
    transaction_hash: HexBytes,
    timeout: float = DEFAULT_RECEIPT_TIMEOUT_SECONDS,
) -> SubmissionResult:
    """
    Wait for the receipt of a submitted transaction. The result is CONFIRMED if the transaction
    succeeded, or FAILED if it reverted.

    If no receipt is obtained, the transaction may still be mined, so the result stays SUBMITTED
    with the transaction hash.
    """

    transaction_hash = HexBytes(transaction_hash)

    try:
        receipt = await signer.wait_for_receipt(transaction_hash, timeout=timeout)
    except Exception as exc:  # noqa: BLE001
        logger.info(
            f"No receipt obtained for transaction {transaction_hash.to_0x_hex()} "
            f"({str(exc) or exc.__class__.__name__}), confirmation pending"
        )
        return SubmissionResult(
            status=SubmissionStatus.SUBMITTED,
            transaction_hash=transaction_hash,
        )

    if receipt.get("status") != 1:
        return SubmissionResult(
            status=SubmissionStatus.FAILED,
            transaction_hash=transaction_hash,
            receipt=receipt,
            error=SubmissionError(
                reason=f"transaction {transaction_hash.to_0x_hex()} reverted",
                transaction_hash=transaction_hash,
            ),
        )

    logger.info(
        f"Transaction {transaction_hash.to_0x_hex()} confirmed in block "
        f"{receipt.get('blockNumber')}"
    )
    return SubmissionResult(
        status=SubmissionStatus.CONFIRMED,
        transaction_hash=transaction_hash,
        receipt=receipt,
    )
