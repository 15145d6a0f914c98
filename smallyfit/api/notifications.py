"""Notification inbox and reminder toggles — /api/v1/notifications."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.auth import require_account
from smallyfit.db.engine import get_session
from smallyfit.db.notification_tables import NotificationRow
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow, SettingsRow
from smallyfit.errors import NotFoundError, ensure_owner
from smallyfit.services.notifications import NOTIFICATION_TOGGLES

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


class ToggleUpdate(BaseModel):
    enabled: bool


def _notification_response(n: NotificationRow) -> dict:
    return {
        "id": n.id,
        "title": n.title,
        "message": n.message,
        "icon": n.icon,
        "read": n.read,
        "created_at": n.created_at.isoformat(),
    }


def _toggles(prefs: SettingsRow) -> list[dict]:
    return [
        {"id": toggle_id, "name": name, "description": description, "enabled": bool(getattr(prefs, column))}
        for toggle_id, (column, name, description) in NOTIFICATION_TOGGLES.items()
    ]


@router.get("")
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    rows = await Repository(session).list_notifications(account.id, limit=limit)
    return [_notification_response(n) for n in rows]


@router.patch("/mark-all-read")
async def mark_all_read(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    updated = await Repository(session).mark_all_notifications_read(account.id)
    await session.commit()
    return {"updated": updated}


@router.get("/settings")
async def notification_settings(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    prefs = await Repository(session).get_or_create_settings(account.id)
    await session.commit()
    return _toggles(prefs)


@router.patch("/settings/{toggle_id}")
async def update_notification_setting(
    toggle_id: str,
    body: ToggleUpdate,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    if toggle_id not in NOTIFICATION_TOGGLES:
        raise NotFoundError("Notification setting", toggle_id)
    column = NOTIFICATION_TOGGLES[toggle_id][0]
    await Repository(session).update_settings(account.id, **{column: body.enabled})
    await session.commit()
    return {"id": toggle_id, "enabled": body.enabled}


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    repo = Repository(session)
    row = await repo.get_notification(notification_id)
    ensure_owner(row, account.id, "Notification")
    row.read = True
    await session.commit()
    return _notification_response(row)
