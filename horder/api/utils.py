from __future__ import annotations

from datetime import date, datetime

from fastapi import Depends
from sqlalchemy.orm import Session

from horder.persistence.db import get_session
from horder.persistence.repositories import SqlRepository


def get_repository(session: Session = Depends(get_session)) -> SqlRepository:
    return SqlRepository(session)


def parse_day(value: str) -> date:
    return date.fromisoformat(value.strip()[:10])


def iso_z(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")
