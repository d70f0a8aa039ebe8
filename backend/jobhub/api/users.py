from __future__ import annotations
from fastapi import APIRouter, Depends

from jobhub.api.deps import get_online_users
from jobhub.services.presence import OnlineUsers

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/online")
def online_count(online_users: OnlineUsers = Depends(get_online_users)):
    return {"success": True, "count": online_users.count}
