# api/admin.py
import logging
import math
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from auth_service.database import get_db, utcnow
from auth_service.errors import bad_request, not_found
from auth_service.models import User
from auth_service.otp import PendingAction, clear_code
from auth_service.schemas import AdminUserUpdate, BulkUpdateData, is_blank
from auth_service.security import admin_required

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin", tags=["Admin Management"])

REQUIRED_FIELDS = ("role", "is_active", "is_verified", "name", "email")


def _get_user(db: Session, user_id: int):
    user = db.get(User, user_id)
    if user is None:
        raise not_found("User not found")
    return user


@admin_router.get("/users")
def get_all_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str = "",
    role: str = "",
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: Session = Depends(get_db),
    admin: User = Depends(admin_required),
):
    query = db.query(User)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    if role:
        query = query.filter(User.role == role)
    if is_active is not None:
        query = query.filter(User.is_active == is_active)

    total = query.count()
    users = (
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "users": [u.to_dict() for u in users],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@admin_router.get("/users/{user_id}")
def get_user_by_id(user_id: int, db: Session = Depends(get_db), admin: User = Depends(admin_required)):
    return _get_user(db, user_id).to_dict()


@admin_router.put("/users/{user_id}")
def update_user(
    user_id: int,
    data: AdminUserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(admin_required),
):
    user = _get_user(db, user_id)

    if user.id == admin.id and data.is_active is False:
        raise bad_request("You cannot deactivate your own account")

    changes = data.model_dump(exclude_unset=True)
    if changes.get("email") and changes["email"] != user.email:
        taken = db.query(User).filter(User.email == changes["email"], User.id != user.id).first()
        if taken:
            raise bad_request("User already exists with this email")

    for field, value in changes.items():
        if field in REQUIRED_FIELDS and is_blank(value):
            continue
        setattr(user, field, value)
    if user.is_verified:
        clear_code(user, PendingAction.VERIFICATION)
    db.commit()
    db.refresh(user)
    logger.info("Admin %s updated user %s.", admin.email, user.id)
    return {"message": "User updated successfully", "user": user.to_dict()}


@admin_router.delete("/users/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(admin_required)):
    user = _get_user(db, user_id)
    if user.id == admin.id:
        raise bad_request("You cannot delete your own account")

    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s.", admin.email, user_id)
    return {"message": "User deleted successfully"}


@admin_router.post("/users/bulk-update")
def bulk_update_users(data: BulkUpdateData, db: Session = Depends(get_db), admin: User = Depends(admin_required)):
    # The caller is never part of a bulk action
    target_ids = [uid for uid in data.user_ids if uid != admin.id]
    query = db.query(User).filter(User.id.in_(target_ids))

    if data.action == "delete":
        count = query.delete(synchronize_session=False)
    else:
        values = {
            "activate": {User.is_active: True},
            "deactivate": {User.is_active: False},
            "verify": {User.is_verified: True, User.otp: None, User.otp_expiry: None},
        }[data.action]
        count = query.update(values, synchronize_session=False)
    db.commit()

    logger.info("Admin %s ran bulk %s on %d users.", admin.email, data.action, count)
    return {"message": f"Bulk {data.action} completed successfully", "modifiedCount": count}


@admin_router.get("/stats")
def get_stats(db: Session = Depends(get_db), admin: User = Depends(admin_required)):
    def count(*criteria):
        return db.query(User).filter(*criteria).count()

    seven_days_ago = utcnow() - timedelta(days=7)
    return {
        "totalUsers": count(),
        "activeUsers": count(User.is_active.is_(True)),
        "inactiveUsers": count(User.is_active.is_(False)),
        "verifiedUsers": count(User.is_verified.is_(True)),
        "unverifiedUsers": count(User.is_verified.is_(False)),
        "adminUsers": count(User.role == "admin"),
        "regularUsers": count(User.role == "user"),
        "recentUsers": count(User.created_at >= seven_days_ago),
    }
