"""Single-owner access control.

Each contract instance holds an explicit ``AccessControl`` set at
construction and checks privileged calls by address equality.
"""

from __future__ import annotations

import logging

from batchsettle.core.errors import NotOwner
from batchsettle.models.assets import NULL_ADDRESS, normalize_address

logger = logging.getLogger(__name__)


class AccessControl:
    """Associates exactly one owner principal with a contract instance."""

    def __init__(self, owner: str) -> None:
        self._owner = normalize_address(owner)

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, caller: str) -> bool:
        return normalize_address(caller) == self._owner

    def require_owner(self, caller: str) -> None:
        """Raise ``NotOwner`` unless ``caller`` is the owner."""
        if not self.is_owner(caller):
            logger.warning("Rejected privileged call from non-owner %s.", caller)
            raise NotOwner()

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand the instance to ``new_owner``. Owner only."""
        self.require_owner(caller)
        new_owner = normalize_address(new_owner)
        if new_owner == NULL_ADDRESS:
            raise ValueError("new owner is the null address")
        logger.info("Ownership transferred from %s to %s.", self._owner, new_owner)
        self._owner = new_owner
