from typing import Optional
from fastapi import Depends, HTTPException, Request, status

from dashquery.config import Settings, get_settings
from dashquery.services.auth import SignedInUser


def _header_int(request: Request, name: str) -> Optional[int]:
    value = request.headers.get(name)
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


async def get_current_user(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Optional[SignedInUser]:
    """Read the identity forwarded by the authenticating proxy."""
    user_id = _header_int(request, settings.auth_user_id_header)
    org_id = _header_int(request, settings.auth_org_id_header)
    if user_id is None or org_id is None:
        return None
    return SignedInUser(user_id=user_id, org_id=org_id)


async def require_auth(user: Optional[SignedInUser] = Depends(get_current_user)) -> SignedInUser:
    """Require a signed-in user - raises 401 if none was forwarded."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user
