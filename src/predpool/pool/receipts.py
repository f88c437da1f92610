"""Bet receipt token - bearer identity for one stake. Minted and burned only by the pool."""

from __future__ import annotations

from collections import defaultdict

import structlog

from predpool.core.errors import BetNotExists, OnlyBetOwner, OnlyPool

log = structlog.get_logger(__name__)


class ReceiptToken:
    """Non-fungible receipts with owner, per-token approval and operator approval."""

    def __init__(self, pool_address: str) -> None:
        self.pool_address = pool_address
        self._owners: dict[int, str] = {}
        self._approved: dict[int, str] = {}
        self._operators: dict[str, set[str]] = defaultdict(set)
        self._last_id = 0

    @property
    def next_id(self) -> int:
        return self._last_id + 1

    @property
    def total_minted(self) -> int:
        return self._last_id

    def _require_pool(self, caller: str) -> None:
        if caller != self.pool_address:
            raise OnlyPool(identity=caller)

    def mint(self, caller: str, owner: str) -> int:
        self._require_pool(caller)
        self._last_id += 1
        self._owners[self._last_id] = owner
        return self._last_id

    def burn(self, caller: str, receipt_id: int) -> None:
        self._require_pool(caller)
        self.owner_of(receipt_id)
        del self._owners[receipt_id]
        self._approved.pop(receipt_id, None)

    def exists(self, receipt_id: int) -> bool:
        return receipt_id in self._owners

    def owner_of(self, receipt_id: int) -> str:
        owner = self._owners.get(receipt_id)
        if owner is None:
            raise BetNotExists(receipt_id=receipt_id)
        return owner

    def balance_of(self, owner: str) -> int:
        return sum(1 for o in self._owners.values() if o == owner)

    def tokens_of_owner(self, owner: str) -> list[int]:
        return sorted(rid for rid, o in self._owners.items() if o == owner)

    def approve(self, caller: str, spender: str, receipt_id: int) -> None:
        owner = self.owner_of(receipt_id)
        if caller != owner and caller not in self._operators[owner]:
            raise OnlyBetOwner(identity=caller, receipt_id=receipt_id)
        self._approved[receipt_id] = spender

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        if approved:
            self._operators[caller].add(operator)
        else:
            self._operators[caller].discard(operator)

    def is_approved_or_owner(self, identity: str, receipt_id: int) -> bool:
        owner = self.owner_of(receipt_id)
        return (
            identity == owner
            or self._approved.get(receipt_id) == identity
            or identity in self._operators[owner]
        )

    def transfer_from(self, caller: str, sender: str, recipient: str, receipt_id: int) -> None:
        if self.owner_of(receipt_id) != sender or not self.is_approved_or_owner(caller, receipt_id):
            raise OnlyBetOwner(identity=caller, receipt_id=receipt_id)
        self._owners[receipt_id] = recipient
        self._approved.pop(receipt_id, None)
        log.debug("receipt_transferred", receipt_id=receipt_id, sender=sender, recipient=recipient)
