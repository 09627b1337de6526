"""
User router - assignee lookup and self-service profile management.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from tasktrack.api.deps import get_requester, get_user_service
from tasktrack.api.schemas import PasswordChangeIn, ProfileOut, ProfileUpdateIn, UserOut, UserRefOut, envelope
from tasktrack.domain.entities import Requester
from tasktrack.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(
    search: Optional[str] = Query(None),
    _: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    """Active users a task can be assigned to, by first name."""
    users = service.list_assignable(search)
    return envelope(users=[UserRefOut.model_validate(user).dump() for user in users])


@router.post("/me/password")
def change_password(
    body: PasswordChangeIn,
    requester: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    service.change_password(requester, body.to_command())
    return envelope(message="Password changed successfully")


@router.get("/{user_id}")
def get_profile(
    user_id: int,
    requester: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    profile = service.profile(requester, user_id)
    user = UserOut.model_validate(profile.user).model_dump()
    out = ProfileOut(**user, tasks_completed=profile.tasks_completed, active_tasks=profile.active_tasks)
    return envelope(user=out.dump())


@router.patch("/{user_id}")
def update_profile(
    user_id: int,
    body: ProfileUpdateIn,
    requester: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    user = service.update_profile(requester, user_id, body.to_command())
    return envelope(user=UserOut.model_validate(user).dump())


@router.post("/{user_id}/deactivate")
def deactivate(
    user_id: int,
    requester: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    user = service.deactivate(requester, user_id)
    return envelope(message="Account deactivated", user=UserOut.model_validate(user).dump())


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    requester: Requester = Depends(get_requester),
    service: UserService = Depends(get_user_service),
):
    service.delete_user(requester, user_id)
    return envelope(message="User deleted")
