from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Body, Depends

from horder.api.utils import get_repository
from horder.backup.snapshot import export_snapshot, restore_snapshot
from horder.core.security import get_session_context
from horder.persistence.repositories import SqlRepository

router = APIRouter(tags=["backup"], dependencies=[Depends(get_session_context)])


@router.get("/backup")
def get_backup(repo: SqlRepository = Depends(get_repository)):
    return export_snapshot(repo)


@router.post("/restore")
def post_restore(snapshot: Any = Body(...), repo: SqlRepository = Depends(get_repository)):
    result = restore_snapshot(repo, snapshot)
    return {"success": True, "message": "Restore completed", "restored": asdict(result)}
