import tomllib
from pathlib import Path
from typing import Annotated

import tomlkit
from pydantic import (
    AfterValidator,
    BaseModel,
    Field,
    HttpUrl,
    PositiveInt,
    WebsocketUrl,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from tickswap.checksum_cache import get_checksum_address
from tickswap.constants import (
    DEFAULT_CHAIN_ID,
    DEFAULT_FEE,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_TICK_SPACING,
    NATIVE_VALUE_BUFFER,
    PERMIT_DEADLINE_SECONDS,
    SWAP_GAS_LIMIT,
    TICK_WINDOW_RADIUS,
    ZERO_ADDRESS,
)
from tickswap.logging import logger
from tickswap.types.aliases import ChainId
from tickswap.validation.evm_values import ValidatedUint24

CONFIG_DIR = Path.home() / ".config" / "tickswap"
CONFIG_FILE = CONFIG_DIR / "config.toml"


class SwapSettings(BaseModel):
    """
    Tunable parameters of the swap pipeline. The window radius, gas limit and native value buffer
    are approximations and may be adjusted without changing the algorithm.
    """

    chain_id: ChainId = DEFAULT_CHAIN_ID
    fee: ValidatedUint24 = DEFAULT_FEE
    tick_spacing: Annotated[int, Field(ge=1, le=32767)] = DEFAULT_TICK_SPACING
    hook_address: Annotated[str, AfterValidator(get_checksum_address)] = ZERO_ADDRESS
    tick_window_radius: Annotated[int, Field(ge=1, le=64)] = TICK_WINDOW_RADIUS
    slippage_bps: Annotated[int, Field(ge=0, le=10_000)] = DEFAULT_SLIPPAGE_BPS
    gas_limit: PositiveInt = SWAP_GAS_LIMIT
    native_value_buffer: Annotated[int, Field(ge=0)] = NATIVE_VALUE_BUFFER
    permit_deadline_seconds: PositiveInt = PERMIT_DEADLINE_SECONDS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TICKSWAP_")

    rpc: dict[
        ChainId,
        HttpUrl | WebsocketUrl | Path,
    ] = {}
    swap: SwapSettings = SwapSettings()

    @field_validator("rpc", mode="after")
    def validate_paths(
        cls,  # noqa: N805
        rpc_dict: dict[ChainId, HttpUrl | WebsocketUrl | Path],
    ) -> dict[ChainId, HttpUrl | WebsocketUrl | Path]:
        """
        Validate the endpoints.

        This will convert all file paths (IPC sockets) to an absolute reference, leaving HTTP and
        WS URLs as-is.
        """

        return {
            chain_id: endpoint.expanduser().absolute() if isinstance(endpoint, Path) else endpoint
            for chain_id, endpoint in rpc_dict.items()
        }


def load_config_from_file(config_path: Path) -> Settings:
    return Settings.model_validate(
        tomllib.loads(
            config_path.read_text(),
        ),
    )


def save_config_to_file(config: Settings, config_path: Path = CONFIG_FILE) -> None:
    config_dict = config.model_dump(mode="json")
    # TOML tables require string keys, and URLs and paths have no native TOML type
    config_dict["rpc"] = {
        str(chain_id): str(endpoint) for chain_id, endpoint in config_dict["rpc"].items()
    }
    config_path.write_text(
        tomlkit.dumps(config_dict),
    )


if not CONFIG_DIR.exists():
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    logger.info(f"Created a configuration directory at {CONFIG_DIR}.")

if CONFIG_FILE.exists():
    settings = load_config_from_file(CONFIG_FILE)
else:
    settings = Settings()
    save_config_to_file(settings)
    logger.info(f"Created a configuration file at {CONFIG_FILE}.")
