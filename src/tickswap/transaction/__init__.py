from .submission import SubmissionResult, SubmissionStatus, confirm_transaction, submit_transaction
from .swap_transaction import SwapTransaction, assemble_swap_transaction, build_swap_calldata
from .universal_router import RouterCommand, V4Action

__all__ = (
    "RouterCommand",
    "SubmissionResult",
    "SubmissionStatus",
    "SwapTransaction",
    "V4Action",
    "assemble_swap_transaction",
    "build_swap_calldata",
    "confirm_transaction",
    "submit_transaction",
)
