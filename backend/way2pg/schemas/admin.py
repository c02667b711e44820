from pydantic import BaseModel
from typing import List

from way2pg.schemas.auth import UserResponse


class DashboardStats(BaseModel):
    total_users: int
    pending_approvals: int
    total_accommodations: int
    total_bookings: int


class AdminUsersResponse(BaseModel):
    users: List[UserResponse]
