import secrets
import smtplib

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from rental_admin import settings
from rental_admin.crud import admin_crud
from rental_admin.deps import get_email_channel, get_otp_store
from rental_admin.dispatcher import EmailChannel
from rental_admin.models import AdminUser
from rental_admin.otp import OtpStore, generate_otp, otp_matches
from rental_admin.schemas import (
    AdminProfile,
    LoginResponse,
    MessageResponse,
    OtpRequest,
    OtpVerify,
    TokenValidate,
    TokenValidation,
)

router = APIRouter(prefix="/admin", tags=["auth"])


def _profile(admin: AdminUser) -> AdminProfile:
    return AdminProfile(
        admin_id=admin.id,
        admin_name=admin.name,
        admin_role=admin.role,
        email=admin.email,
    )


@router.post("/login-otp", response_model=MessageResponse)
async def request_login_otp(
    payload: OtpRequest,
    store: OtpStore = Depends(get_otp_store),
    email_channel: EmailChannel = Depends(get_email_channel),
) -> MessageResponse:
    admin = await admin_crud.get_by_email(payload.email)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Email not found in admin users",
        )

    otp = generate_otp()
    await store.set(payload.email, otp, settings.OTP_TTL)

    minutes = settings.OTP_TTL // 60
    try:
        sent = await email_channel.send(
            "Admin Login OTP",
            f"Your Admin Login OTP is: {otp}. This OTP will expire in {minutes} minutes.",
            payload.email,
        )
    except (smtplib.SMTPException, OSError):
        logger.exception("Admin login OTP email to {} failed", payload.email)
        sent = False
    if sent is False:
        logger.warning("Login OTP for {} not delivered, discarding it", payload.email)
        await store.delete(payload.email)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not send OTP"
        )

    logger.info("Login OTP issued for {}", payload.email)
    return MessageResponse(message="OTP sent successfully")


@router.post("/verify-login-otp", response_model=LoginResponse)
async def verify_login_otp(
    payload: OtpVerify,
    store: OtpStore = Depends(get_otp_store),
) -> LoginResponse:
    stored = await store.get(payload.email)
    if stored is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid OTP found. Please request a new OTP.",
        )
    if not otp_matches(stored, payload.otp):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OTP"
        )

    admin = await admin_crud.get_by_email(payload.email)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Admin user not found"
        )

    token = secrets.token_hex(32)
    await admin_crud.set_token(admin, token)
    await store.delete(payload.email)

    logger.info("Admin {} logged in", admin.id)
    return LoginResponse(message="Login successful", token=token, user=_profile(admin))


@router.post("/validate-token", response_model=TokenValidation)
async def validate_token(payload: TokenValidate) -> TokenValidation:
    admin = await admin_crud.get_by_token(payload.token)
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        )
    return TokenValidation(valid=True, user=_profile(admin))
