"""
Auction app configuration

The config is loaded from a TOML file:

    [solana]
    url = "http://localhost:8899"
    commitment = "confirmed"

    [auction]
    program_id = "<base58 address>"

    [keys]
    dir = "./keys"

The `NETWORK` environment variable overrides `solana.url`.
"""
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Mapping

from solana.rpc.commitment import Commitment
from solders.pubkey import Pubkey

from auctionpack.solana.client.model import Address

DEFAULT_URL: Final[str] = "http://localhost:8899"
DEFAULT_COMMITMENT: Final[str] = "confirmed"
DEFAULT_KEYS_DIR: Final[str] = "./keys"

NETWORK_ENV_VAR: Final[str] = "NETWORK"


class ConfigError(Exception):
    """
    Config is missing a required setting or a setting is invalid
    """


@dataclass(slots=True)
class AuctionAppConfig:
    url: str
    commitment: Commitment
    program_id: Address
    keys_dir: Path

    @classmethod
    def from_dict(
        cls,
        config: dict[str, Any],
        env: Mapping[str, str] = os.environ,
    ) -> "AuctionAppConfig":
        """
        :param env: environment variables used to override config settings
        :raises ConfigError: if `auction.program_id` is missing or is not a valid address
        """
        solana = config.get("solana", {})
        auction = config.get("auction", {})
        keys = config.get("keys", {})

        if "program_id" not in auction:
            raise ConfigError("auction.program_id is required")
        try:
            program_id = Pubkey.from_string(auction["program_id"])
        except (ValueError, TypeError) as err:
            raise ConfigError(
                f"auction.program_id is not a valid address: {auction['program_id']}"
            ) from err

        return cls(
            url=env.get(NETWORK_ENV_VAR) or solana.get("url", DEFAULT_URL),
            commitment=Commitment(solana.get("commitment", DEFAULT_COMMITMENT)),
            program_id=program_id,
            keys_dir=Path(keys.get("dir", DEFAULT_KEYS_DIR)),
        )

    @classmethod
    def from_config_file(
        cls,
        file: Path,
        env: Mapping[str, str] = os.environ,
    ) -> "AuctionAppConfig":
        """
        Constructs the config from the specified TOML config file
        """
        with open(file, "rb") as config_file:
            config = tomllib.load(config_file)
        return cls.from_dict(config, env)
