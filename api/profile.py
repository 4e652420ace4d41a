# api/profile.py
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth_service.database import get_db, utcnow
from auth_service.errors import unauthorized
from auth_service.models import User
from auth_service.schemas import DeleteAccountData, ProfileUpdate, is_blank
from auth_service.security import verified_user_required, verify_password

logger = logging.getLogger(__name__)

profile_router = APIRouter(prefix="/profile", tags=["Profile"])

PROFILE_FIELDS = ("name", "email", "phone", "bio", "avatar")


def profile_completeness(user):
    """Percentage of filled profile fields, in steps of 20."""
    filled = sum(1 for field in PROFILE_FIELDS if getattr(user, field))
    return filled * 100 // len(PROFILE_FIELDS)


@profile_router.get("")
def get_profile(user: User = Depends(verified_user_required)):
    return user.to_dict()


@profile_router.put("")
def update_profile(
    data: ProfileUpdate,
    user: User = Depends(verified_user_required),
    db: Session = Depends(get_db),
):
    if not is_blank(data.name):
        user.name = data.name.strip()
    for field in ("phone", "bio", "avatar"):
        if field in data.model_fields_set:
            setattr(user, field, getattr(data, field))
    db.commit()
    db.refresh(user)
    return {"message": "Profile updated successfully", "user": user.to_dict()}


@profile_router.delete("")
def delete_account(
    data: DeleteAccountData,
    user: User = Depends(verified_user_required),
    db: Session = Depends(get_db),
):
    if not verify_password(data.password, user.password):
        raise unauthorized("Incorrect password")

    db.delete(user)
    db.commit()
    logger.info("User %s deleted their account.", user.email)
    return {"message": "Account deleted successfully"}


@profile_router.get("/stats")
def get_profile_stats(user: User = Depends(verified_user_required)):
    return {
        "accountAge": (utcnow() - user.created_at).days,
        "isVerified": user.is_verified,
        "profileComplete": profile_completeness(user),
        "lastUpdated": user.updated_at.isoformat() if user.updated_at else None,
    }
