"""Asset ledger — the ownership bookkeeping the registry writes into.

Covers what redemption needs: existence, owner, balance and token URI
lookups, and creation followed by transfer as one step. Approvals and
user-initiated transfers are out of scope.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from lazymint.addresses import ZERO_ADDRESS, canonical_address
from lazymint.errors import AlreadyMinted, NonexistentAsset
from lazymint.models.registry import AssetRecord


class AssetLedger:
    """In-memory asset records keyed by asset id."""

    def __init__(self, uri_prefix: str = "ipfs://") -> None:
        self._uri_prefix = uri_prefix
        self._records: Dict[int, AssetRecord] = {}
        self._balances: Dict[str, int] = {}

    def exists(self, asset_id: int) -> bool:
        return asset_id in self._records

    def require_unminted(self, asset_id: int) -> None:
        if asset_id in self._records:
            raise AlreadyMinted("ERC721: token already minted")

    def record(self, asset_id: int) -> AssetRecord:
        record = self._records.get(asset_id)
        if record is None:
            raise NonexistentAsset(f"Nonexistent asset: {asset_id}")
        return record

    def owner_of(self, asset_id: int) -> str:
        if asset_id not in self._records:
            raise NonexistentAsset("ERC721: owner query for nonexistent token")
        return self._records[asset_id].owner

    def token_uri(self, asset_id: int) -> str:
        if asset_id not in self._records:
            raise NonexistentAsset("ERC721URIStorage: URI query for nonexistent token")
        return self._records[asset_id].uri

    def balance_of(self, owner: str) -> int:
        return self._balances.get(canonical_address(owner), 0)

    @staticmethod
    def transfer_path(creator: str, recipient: str) -> List[Tuple[str, str]]:
        """The (from, to) transfers a mint for creator then hand-off to recipient performs."""
        transfers = [(ZERO_ADDRESS, creator)]
        if recipient != creator:
            transfers.append((creator, recipient))
        return transfers

    def mint_and_transfer(
        self,
        asset_id: int,
        creator: str,
        recipient: str,
        uri: str,
    ) -> List[Tuple[str, str]]:
        """Create the asset for creator, then hand it to recipient.

        Returns the (from, to) transfers performed, in order. When
        creator and recipient are the same only the mint happens.
        """
        self.require_unminted(asset_id)
        creator = canonical_address(creator)
        recipient = canonical_address(recipient)

        record = AssetRecord(
            asset_id=asset_id,
            owner=creator,
            uri=f"{self._uri_prefix}{uri}",
            creator=creator,
        )
        self._records[asset_id] = record
        self._balances[creator] = self._balances.get(creator, 0) + 1
        if recipient != creator:
            record.owner = recipient
            self._balances[creator] -= 1
            self._balances[recipient] = self._balances.get(recipient, 0) + 1
        return self.transfer_path(creator, recipient)
