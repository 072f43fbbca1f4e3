from .erc20 import Erc20Token, EtherPlaceholder

__all__ = (
    "Erc20Token",
    "EtherPlaceholder",
)
