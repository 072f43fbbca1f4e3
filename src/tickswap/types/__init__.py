from .aliases import BlockNumber, ChainId, Tick, Word

__all__ = (
    "BlockNumber",
    "ChainId",
    "Tick",
    "Word",
)
