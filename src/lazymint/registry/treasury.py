"""Treasury — custody of redemption payments.

The balance is the sum of accepted payments minus sweeps. The only
way out is withdraw_all, which moves the whole balance to the
recipient fixed at construction.
"""

from __future__ import annotations

from typing import Tuple

from lazymint.addresses import canonical_address
from lazymint.models.registry import UINT256_MAX, require_uint256


class Treasury:
    """Aggregate held funds in the smallest currency unit."""

    def __init__(self, recipient: str, balance: int = 0) -> None:
        self._recipient = canonical_address(recipient)
        self._balance = require_uint256("balance", balance)
        self._total_withdrawn = 0

    @property
    def recipient(self) -> str:
        return self._recipient

    @property
    def balance(self) -> int:
        return self._balance

    @property
    def total_withdrawn(self) -> int:
        return self._total_withdrawn

    def can_accept(self, amount: int) -> bool:
        return self._balance + amount <= UINT256_MAX

    def deposit(self, amount: int) -> None:
        require_uint256("amount", amount)
        if not self.can_accept(amount):
            raise ValueError("Treasury balance would overflow uint256")
        self._balance += amount

    def withdraw_all(self) -> Tuple[str, int]:
        """Sweep the full balance. Returns (recipient, amount); amount may be 0."""
        amount = self._balance
        self._balance = 0
        self._total_withdrawn += amount
        return self._recipient, amount
