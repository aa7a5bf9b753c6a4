"""The central protocol record and the authority checks made against it."""

from __future__ import annotations

from dataclasses import dataclass


class Unauthorized(PermissionError):
    """The signer is not the policy owner."""


class DebugRequired(RuntimeError):
    """The operation is only allowed in debug mode."""


@dataclass
class NirvCenter:
    """Central protocol state."""

    signer_authority: bytes = bytes(32)
    signer_authority_seed: bytes = bytes(32)
    signer_authority_bump: int = 0
    debug_mode: bool = False
    is_halted: bool = False
    policy_owner: bytes = bytes(32)
    config: bytes = bytes(32)

    def authority_seeds(self) -> tuple[bytes, bytes]:
        """Seeds that derive the signing authority: the seed key and the bump."""
        return self.signer_authority_seed, bytes([self.signer_authority_bump])


def admin(nirv_center: NirvCenter, signer: bytes) -> None:
    """Raise :class:`Unauthorized` unless ``signer`` is the policy owner."""
    if signer != nirv_center.policy_owner:
        raise Unauthorized("signer is not the policy owner")


def is_debug(nirv_center: NirvCenter) -> None:
    """Raise :class:`DebugRequired` unless the center is in debug mode."""
    if not nirv_center.debug_mode:
        raise DebugRequired("debug mode is required")