"""Requester identity supplied by the upstream identity provider.

The gateway authenticates the caller and forwards the user id and the token's
scopes as headers. This service never sees credentials.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Header, HTTPException, status

from .core.errors import AuthorizationError

WILDCARD_SCOPE = "*"


@dataclass(frozen=True, slots=True)
class Principal:
    user_id: str
    scopes: frozenset[str]

    def can(self, scope: str) -> bool:
        return WILDCARD_SCOPE in self.scopes or scope in self.scopes


def parse_scopes(raw: str | None) -> frozenset[str]:
    """Split a space or comma separated scope list."""

    if not raw:
        return frozenset()
    return frozenset(part for part in raw.replace(",", " ").split() if part)


async def get_principal(
    x_user_id: str | None = Header(default=None),
    x_token_scopes: str | None = Header(default=None),
) -> Principal:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthenticated")
    return Principal(user_id=x_user_id, scopes=parse_scopes(x_token_scopes))


async def get_optional_principal(
    x_user_id: str | None = Header(default=None),
    x_token_scopes: str | None = Header(default=None),
) -> Principal | None:
    if not x_user_id:
        return None
    return Principal(user_id=x_user_id, scopes=parse_scopes(x_token_scopes))


def require_scope(scope: str) -> Callable[..., object]:
    """Dependency factory rejecting principals whose token lacks ``scope``."""

    async def _dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if not principal.can(scope):
            raise AuthorizationError(f"Token is missing the {scope} scope")
        return principal

    return _dependency
