"""Membership root anchoring — publishes an allowlist root on Ethereum.

Before a maintainer pushes a new root into the registry, the same root
can be embedded in a 0-value self-send transaction. The transaction is
a public, timestamped witness that this exact allowlist commitment
existed, so issuers can check the root they are being verified
against.

This is NOT a registry update. No registry state changes here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from lazymint.addresses import canonical_hash

logger = logging.getLogger(__name__)

EXPLORERS: dict[int, str] = {
    1: "https://etherscan.io/tx/",
    11155111: "https://sepolia.etherscan.io/tx/",
}


@dataclass(frozen=True)
class AnchorRecord:
    """A record of a successful root anchor."""
    root: str
    tx_hash: str
    block_number: int
    chain_id: int
    timestamp_utc: str
    explorer_url: str


def anchor_root(
    root: str,
    rpc_url: str,
    private_key: str,
    chain_id: int = 11155111,  # Sepolia
    gas: int = 30_000,
    gas_price_gwei: str = "2",
    timeout: int = 300,
) -> AnchorRecord:
    """Anchor a membership root by embedding it in a transaction.

    Sends a 0-ETH self-send with the 32 root bytes as calldata and
    waits for one confirmation.
    """
    from web3 import Web3, HTTPProvider
    from eth_account import Account

    digest = canonical_hash(root)
    w3 = Web3(HTTPProvider(rpc_url))
    acct = Account.from_key(private_key)

    nonce = w3.eth.get_transaction_count(acct.address)
    tx = {
        "to": acct.address,  # self-send, 0 ETH
        "value": 0,
        "gas": gas,
        "gasPrice": w3.to_wei(gas_price_gwei, "gwei"),
        "nonce": nonce,
        "chainId": chain_id,
        "data": bytes.fromhex(digest[2:]),
    }

    signed = acct.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.info(f"Sent root anchor tx {tx_hash.hex()}, waiting for confirmation")

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)

    explorer = EXPLORERS.get(chain_id)
    explorer_url = f"{explorer}{tx_hash.hex()}" if explorer else ""
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    logger.info(f"Root {digest} anchored in block {receipt.blockNumber}")

    return AnchorRecord(
        root=digest,
        tx_hash=tx_hash.hex(),
        block_number=receipt.blockNumber,
        chain_id=chain_id,
        timestamp_utc=now,
        explorer_url=explorer_url,
    )
