from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from horder.api.utils import get_repository
from horder.core.security import SessionContext, get_session_context
from horder.identity.users import change_password, get_profile, login, update_profile
from horder.persistence.repositories import SqlRepository

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    username: str = "admin"
    password: str


class ProfileUpdate(BaseModel):
    full_name: str


class PasswordChange(BaseModel):
    old_password: str
    new_password: str
    confirm_password: str


@router.post("/login")
def post_login(body: LoginRequest, repo: SqlRepository = Depends(get_repository)):
    token = login(repo, body.username, body.password)
    return {"success": True, "token": token}


@router.get("/profile")
def read_profile(
    ctx: SessionContext = Depends(get_session_context),
    repo: SqlRepository = Depends(get_repository),
):
    user = get_profile(repo, ctx.username)
    return {"username": user.username, "full_name": user.full_name}


@router.put("/profile")
def put_profile(
    body: ProfileUpdate,
    ctx: SessionContext = Depends(get_session_context),
    repo: SqlRepository = Depends(get_repository),
):
    user = update_profile(repo, ctx.username, body.full_name)
    return {"success": True, "user": {"username": user.username, "full_name": user.full_name}}


@router.put("/password")
def put_password(
    body: PasswordChange,
    ctx: SessionContext = Depends(get_session_context),
    repo: SqlRepository = Depends(get_repository),
):
    change_password(repo, ctx.username, body.old_password, body.new_password, body.confirm_password)
    return {"success": True}
