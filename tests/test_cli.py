import importlib

import pytest
from click.testing import CliRunner

from tickswap import __version__
from tickswap.cli import cli
from tickswap.config import settings
from tickswap.constants import ZERO_ADDRESS
from tickswap.exceptions import TickswapValueError
from tickswap.uniswap.v4_functions import build_pool_key, generate_v4_pool_id

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"

# Hardhat development account #0
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

swap_command = importlib.import_module("tickswap.cli.swap")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_cli_help(runner: CliRunner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("pool-id", "scan", "swap"):
        assert command in result.output


def test_cli_version(runner: CliRunner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_pool_id(runner: CliRunner):
    result = runner.invoke(
        cli, ["pool-id", "ETH", USDC, "--fee", "500", "--tick-spacing", "10"]
    )
    assert result.exit_code == 0
    expected = generate_v4_pool_id(
        build_pool_key(ZERO_ADDRESS, USDC, fee=500, tick_spacing=10, hooks=ZERO_ADDRESS)
    )
    assert result.output.strip() == expected.to_0x_hex()


def test_cli_pool_id_order_does_not_matter(runner: CliRunner):
    forward = runner.invoke(cli, ["pool-id", "eth", USDC])
    reverse = runner.invoke(cli, ["pool-id", USDC, "eth"])
    assert forward.exit_code == reverse.exit_code == 0
    assert forward.output == reverse.output


def test_cli_pool_id_rejects_invalid_currency(runner: CliRunner):
    result = runner.invoke(cli, ["pool-id", "ETH", "not-an-address"])
    assert result.exit_code == 2
    assert "not-an-address" in result.output


def test_cli_swap_requires_private_key(runner: CliRunner, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("TICKSWAP_PRIVATE_KEY", raising=False)
    result = runner.invoke(cli, ["swap", "ETH", USDC, "1"])
    assert result.exit_code == 2
    assert "--private-key" in result.output


def test_cli_scan_without_rpc(runner: CliRunner, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "rpc", {})
    result = runner.invoke(cli, ["scan", "ETH", USDC, "--chain-id", "8453"])
    assert result.exit_code == 1
    assert "does not have an RPC defined" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["swap", "ETH", USDC, "1", "--chain-id", "999999", "--private-key", PRIVATE_KEY],
        ["scan", "ETH", USDC, "--chain-id", "999999"],
    ],
)
def test_cli_unknown_chain(runner: CliRunner, args: list[str]):
    result = runner.invoke(cli, args)
    assert result.exit_code == 1
    assert "No Uniswap V4 deployment is known for chain ID 999999" in result.output
    assert "Traceback" not in result.output


def test_cli_swap_reports_token_errors_and_disconnects(
    runner: CliRunner, monkeypatch: pytest.MonkeyPatch
):
    fake_w3 = object()
    disconnected = []

    async def get_async_web3_from_config(chain_id):
        return fake_w3

    async def load_token(w3, currency, chain_id):
        raise TickswapValueError(message=f"No contract deployed at {currency}")

    async def disconnect_web3(w3):
        disconnected.append(w3)

    monkeypatch.setattr(swap_command, "get_async_web3_from_config", get_async_web3_from_config)
    monkeypatch.setattr(swap_command, "load_token", load_token)
    monkeypatch.setattr(swap_command, "disconnect_web3", disconnect_web3)

    result = runner.invoke(cli, ["swap", "ETH", USDC, "1", "--private-key", PRIVATE_KEY])
    assert result.exit_code == 1
    assert "No contract deployed at ETH" in result.output
    assert disconnected == [fake_w3]
