"""Account API routes — profile, password, deletion, subscription status, admin premium flag."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from smallyfit.auth import hash_password, require_account, require_admin, verify_password
from smallyfit.db.engine import get_session
from smallyfit.db.repository import Repository
from smallyfit.db.user_tables import AccountRow
from smallyfit.errors import ConflictError, NotFoundError
from smallyfit.services import entitlements

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["users"])


# ── Schemas ──────────────────────────────────────────────────────────────────

class UpdateAccountRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class PremiumUpdate(BaseModel):
    is_premium: bool


def account_response(account: AccountRow, now: datetime | None = None) -> dict:
    now = now or datetime.now(timezone.utc)
    return {
        "id": account.id,
        "name": account.name,
        "email": account.email,
        "is_premium": account.is_premium,
        "is_admin": account.is_admin,
        "created_at": account.created_at.isoformat() if account.created_at else None,
        "trial_active": entitlements.is_trial_active(account.created_at, account.is_premium, now),
        "days_remaining": None if account.is_premium else entitlements.days_remaining(account.created_at, now),
    }


# ── Profile ──────────────────────────────────────────────────────────────────

@router.get("/user")
async def get_profile(account: AccountRow = Depends(require_account)):
    return account_response(account)


@router.patch("/user")
async def update_profile(
    req: UpdateAccountRequest,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Update name and/or email. Email must stay unique."""
    repo = Repository(session)
    if req.email is not None and req.email.lower() != account.email:
        existing = await repo.get_account_by_email(req.email)
        if existing and existing.id != account.id:
            raise ConflictError("Email already registered")
        account.email = req.email.lower()
    if req.name is not None:
        account.name = req.name
    account.updated_at = datetime.now(timezone.utc)
    await session.commit()
    return account_response(account)


@router.post("/user/change-password")
async def change_password(
    req: ChangePasswordRequest,
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    if not verify_password(req.current_password, account.password_hash):
        raise HTTPException(400, "Current password is incorrect")
    account.password_hash = hash_password(req.new_password)
    account.updated_at = datetime.now(timezone.utc)
    await session.commit()
    return {"message": "Password updated"}


@router.delete("/user", status_code=204)
async def delete_profile(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Delete the account and everything it owns."""
    account_id = account.id
    await Repository(session).delete_account(account_id)
    await session.commit()
    logger.info("Deleted account %s", account_id)
    return Response(status_code=204)


# ── Subscription ─────────────────────────────────────────────────────────────

@router.get("/subscription/me")
async def my_subscription(
    account: AccountRow = Depends(require_account),
    session: AsyncSession = Depends(get_session),
):
    """Plan, trial state and free-tier limits, for rendering upsells."""
    count = await Repository(session).count_measurements(account.id)
    return entitlements.entitlement_summary(
        account.created_at, account.is_premium, datetime.now(timezone.utc), measurement_count=count,
    )


@router.patch("/admin/accounts/{account_id}/premium")
async def set_premium(
    account_id: str,
    req: PremiumUpdate,
    _admin: AccountRow = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
):
    target = await Repository(session).get_account(account_id)
    if target is None:
        raise NotFoundError("Account", account_id)
    target.is_premium = req.is_premium
    target.updated_at = datetime.now(timezone.utc)
    await session.commit()
    logger.info("Premium set to %s for account %s", req.is_premium, account_id)
    return account_response(target)
