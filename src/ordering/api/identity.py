"""Request identity, as handed to us by the upstream identity service.

Authentication happens before requests reach this API. The gateway in front
of it forwards the signed-in user id, the anonymous session cart id and the
user's role as headers; nothing here creates or checks them.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

from ordering.cart.store import CartIdentity


@dataclass(frozen=True)
class RequestIdentity:
    user_id: str | None = None
    session_cart_id: str | None = None
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def cart_identity(self) -> CartIdentity:
        return CartIdentity(user_id=self.user_id, session_cart_id=self.session_cart_id)


def request_identity(
    x_user_id: str | None = Header(default=None),
    x_session_cart_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> RequestIdentity:
    return RequestIdentity(user_id=x_user_id or None, session_cart_id=x_session_cart_id or None, role=x_user_role)


def signed_in_user(identity: RequestIdentity = Depends(request_identity)) -> RequestIdentity:
    if not identity.user_id:
        raise HTTPException(status_code=401, detail="Sign in required")
    return identity


def admin_user(identity: RequestIdentity = Depends(signed_in_user)) -> RequestIdentity:
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return identity
