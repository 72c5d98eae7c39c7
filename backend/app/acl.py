"""Access control constants and helpers.

A child's record is visible to its owner and to every user holding a
``ChildAccess`` grant for it.  Grants are created by redeeming a share
code, an 8 character token drawn from an alphabet without look-alike
glyphs so it can be read aloud or retyped by hand.  Having these values
in one place makes it easy to audit and update the security model.
"""

import secrets
from dataclasses import dataclass

SHARE_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
SHARE_CODE_LENGTH = 8

LEVEL_OWNER = "owner"
LEVEL_SHARED = "shared"
LEVEL_NONE = "none"


def generate_share_code() -> str:
    """Return a random candidate code; uniqueness is up to the caller."""
    return "".join(
        secrets.choice(SHARE_CODE_ALPHABET) for _ in range(SHARE_CODE_LENGTH)
    )


def normalize_share_code(code: str) -> str:
    return code.strip().upper()


@dataclass(frozen=True)
class Visibility:
    """Resolved access of one user to one child."""

    level: str
    is_read_only: bool = False

    @property
    def is_owner(self) -> bool:
        return self.level == LEVEL_OWNER

    @property
    def is_shared(self) -> bool:
        return self.level == LEVEL_SHARED

    @property
    def can_read(self) -> bool:
        return self.level != LEVEL_NONE

    @property
    def can_write(self) -> bool:
        return self.can_read and not self.is_read_only


OWNER = Visibility(LEVEL_OWNER)
NO_ACCESS = Visibility(LEVEL_NONE, is_read_only=True)


def shared_access(is_read_only: bool) -> Visibility:
    return Visibility(LEVEL_SHARED, is_read_only=is_read_only)
