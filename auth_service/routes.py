# auth_service/routes.py
import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from .database import get_db
from .emailer import get_email_sender
from .errors import ApiError, EmailDeliveryError, bad_request, forbidden, not_found, unauthorized
from .models import User
from .otp import AlreadyVerified, PendingAction, check_code, issue_code
from .schemas import (
    ChangePasswordData,
    EmailData,
    LoginData,
    RegisterData,
    ResetPasswordData,
    VerifyOTPData,
)
from .security import get_current_user, get_password_hash, issue_token, verify_password

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_user_by_email(db: Session, email):
    return db.query(User).filter(User.email == email).first()


def _check_password_length(request: Request, password):
    min_length = request.app.state.config.MIN_PASSWORD_LENGTH
    if len(password) < min_length:
        raise bad_request(f"Password must be at least {min_length} characters")


def _otp_lifetime(request: Request):
    return request.app.state.config.OTP_EXPIRE_MINUTES


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    request: Request,
    data: RegisterData,
    db: Session = Depends(get_db),
    mailer=Depends(get_email_sender),
):
    _check_password_length(request, data.password)

    if get_user_by_email(db, data.email):
        logger.warning("Signup attempt with existing email: %s", data.email)
        raise bad_request("User already exists with this email")

    user = User(
        name=data.name,
        email=data.email,
        password=get_password_hash(data.password),
        is_verified=False,
    )
    otp = issue_code(user, PendingAction.VERIFICATION, _otp_lifetime(request))
    db.add(user)
    db.commit()
    db.refresh(user)

    try:
        await mailer.send_otp(user.email, otp, user.name)
    except EmailDeliveryError:
        # Roll back the signup so the address can register again
        db.delete(user)
        db.commit()
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to send verification email")

    logger.info("New user %s registered, verification OTP sent.", user.email)
    return {
        "message": "Registration successful! Please check your email for OTP",
        "userId": user.id,
        "email": user.email,
    }


@auth_router.post("/verify-otp")
async def verify_otp(
    request: Request,
    data: VerifyOTPData,
    db: Session = Depends(get_db),
    mailer=Depends(get_email_sender),
):
    user = get_user_by_email(db, data.email)
    check_code(user, PendingAction.VERIFICATION, data.otp)

    user.is_verified = True
    db.commit()
    db.refresh(user)
    logger.info("User %s verified their email.", user.email)

    await mailer.send_welcome(user.email, user.name)

    return {
        "message": "Email verified successfully!",
        "token": issue_token(request, user),
        "user": user.to_dict(),
    }


@auth_router.post("/resend-otp")
async def resend_otp(
    request: Request,
    data: EmailData,
    db: Session = Depends(get_db),
    mailer=Depends(get_email_sender),
):
    user = get_user_by_email(db, data.email)
    if not user:
        raise not_found("User not found")
    if user.is_verified:
        raise AlreadyVerified()

    otp = issue_code(user, PendingAction.VERIFICATION, _otp_lifetime(request))
    db.commit()

    await mailer.send_otp(user.email, otp, user.name)
    return {"message": "OTP sent successfully! Please check your email"}


@auth_router.post("/login")
async def login(request: Request, data: LoginData, db: Session = Depends(get_db)):
    user = get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user.password):
        logger.warning("Failed login attempt for email: %s", data.email)
        raise unauthorized("Invalid credentials")

    if not user.is_active:
        raise forbidden("Your account has been deactivated. Please contact support.")

    if not user.is_verified:
        raise forbidden("Please verify your email first", isVerified=False, email=user.email)

    logger.info("User %s logged in successfully.", user.email)
    return {
        "message": "Login successful",
        "token": issue_token(request, user),
        "user": user.to_dict(),
    }


@auth_router.post("/forgot-password")
async def forgot_password(
    request: Request,
    data: EmailData,
    db: Session = Depends(get_db),
    mailer=Depends(get_email_sender),
):
    user = get_user_by_email(db, data.email)
    if not user:
        raise not_found("No account found with this email")

    otp = issue_code(user, PendingAction.PASSWORD_RESET, _otp_lifetime(request))
    db.commit()

    await mailer.send_password_reset_otp(user.email, otp, user.name)
    logger.info("Password reset OTP sent to %s.", user.email)
    return {"message": "Password reset OTP sent to your email", "email": user.email}


@auth_router.post("/reset-password")
async def reset_password(request: Request, data: ResetPasswordData, db: Session = Depends(get_db)):
    _check_password_length(request, data.new_password)

    user = get_user_by_email(db, data.email)
    check_code(user, PendingAction.PASSWORD_RESET, data.otp)

    user.password = get_password_hash(data.new_password)
    db.commit()
    logger.info("Password reset for %s.", user.email)
    return {"message": "Password reset successful! You can now login with your new password"}


@auth_router.post("/change-password")
async def change_password(
    request: Request,
    data: ChangePasswordData,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_password_length(request, data.new_password)

    if not verify_password(data.current_password, user.password):
        raise unauthorized("Current password is incorrect")

    user.password = get_password_hash(data.new_password)
    db.commit()
    return {"message": "Password changed successfully!"}


@auth_router.get("/me")
async def get_me(user: User = Depends(get_current_user)):
    return user.to_dict()
