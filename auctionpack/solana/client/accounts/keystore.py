"""
File based key store.

Keys are stored in a directory, by logical name, e.g., "exhibitor", "bidder1", "escrow":

- `{name}.json` - secret key stored as a JSON array of 64 bytes
- `{name}_pub.json` - address stored as a base58 encoded JSON string
"""
import json
from pathlib import Path

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from auctionpack.solana.client.accounts.error import InvalidKeyError, KeyNotFoundError
from auctionpack.solana.client.model import Address


class FileKeyStore:
    """
    Supplies signing keypairs and known addresses by logical name
    """

    def __init__(self, keys_dir: Path):
        self.keys_dir = keys_dir

    def get_address(self, name: str) -> Address:
        """
        :raises KeyNotFoundError: if no address is stored under the name
        """
        content = self._read(self.keys_dir / f"{name}_pub.json")
        try:
            return Pubkey.from_string(json.loads(content))
        except (ValueError, TypeError) as err:
            raise InvalidKeyError(name) from err

    def get_keypair(self, name: str) -> Keypair:
        """
        :raises KeyNotFoundError: if no secret key is stored under the name
        """
        content = self._read(self.keys_dir / f"{name}.json")
        try:
            return Keypair.from_bytes(bytes(json.loads(content)))
        except (ValueError, TypeError) as err:
            raise InvalidKeyError(name) from err

    def write_address(self, name: str, address: Address):
        self.keys_dir.mkdir(parents=True, exist_ok=True)
        (self.keys_dir / f"{name}_pub.json").write_text(json.dumps(str(address)))

    def write_keypair(self, name: str, keypair: Keypair):
        """
        Stores both the secret key and the address
        """
        self.keys_dir.mkdir(parents=True, exist_ok=True)
        (self.keys_dir / f"{name}.json").write_text(json.dumps(list(bytes(keypair))))
        self.write_address(name, keypair.pubkey())

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text()
        except FileNotFoundError as err:
            raise KeyNotFoundError(path.name) from err
