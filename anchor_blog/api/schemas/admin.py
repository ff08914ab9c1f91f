from __future__ import annotations

from pydantic import BaseModel


class RoleChangeResponse(BaseModel):
    user_id: str
    role: str
