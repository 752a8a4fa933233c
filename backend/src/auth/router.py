"""Authentication endpoints for ReviewFlow API

Provides account signup, login, admin login, password reset and the
email one-time passcode flow.
"""

import logging

from fastapi import APIRouter, Depends, status

from dependencies import get_account_service, get_otp_service
from domain.errors import ConflictError, ValidationError
from .otp import OTPService
from .rate_limit import rate_limit
from .schemas import (
    LoginRequest,
    LoginResponse,
    LoginUser,
    MessageResponse,
    ResetPasswordRequest,
    SendOTPRequest,
    SignupRequest,
    SuccessResponse,
    VerifyOTPRequest,
)
from .service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post("/api/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Create an uploader account.

    Raises:
        ValidationError (400): Username or email already taken
    """
    try:
        accounts.signup(
            username=body.username,
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
            phone=body.phone,
        )
    except ConflictError as e:
        # Clients of this route expect 400 for duplicates
        raise ValidationError(e.message)

    return MessageResponse(message="Account created successfully")


@router.post(
    "/api/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limit("login"))],
)
def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Check credentials and return the user's role.

    Raises:
        AuthError (401): Unknown username or wrong password
        RateLimitedError (429): Too many attempts
    """
    user = accounts.login(body.username, body.password)
    return LoginResponse(user=LoginUser(username=user.username, role=user.role))


@router.post(
    "/admin-login",
    response_model=SuccessResponse,
    dependencies=[Depends(rate_limit("admin_login"))],
)
def admin_login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
):
    accounts.admin_login(body.username, body.password)
    return SuccessResponse()


@router.post("/reset-password", response_model=SuccessResponse)
def reset_password(
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
):
    """Set a new password when username and email match.

    Raises:
        NotFoundError (404): No user with that username and email
    """
    accounts.reset_password(body.username, body.email, body.new_password)
    return SuccessResponse()


@router.post(
    "/send-otp",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("send_otp"))],
)
def send_otp(
    body: SendOTPRequest,
    otp: OTPService = Depends(get_otp_service),
):
    """Email a one-time passcode.

    Raises:
        MismatchError (400): Username given but not owned by the email
        OTPDeliveryError (500): Mail relay unavailable
    """
    otp.request(body.email, username=body.username)
    return MessageResponse(message="OTP sent successfully")


@router.post(
    "/verify-otp",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit("verify_otp"))],
)
def verify_otp(
    body: VerifyOTPRequest,
    otp: OTPService = Depends(get_otp_service),
):
    """Check and consume a one-time passcode.

    Raises:
        InvalidCodeError (400): Missing, expired or wrong code
    """
    otp.verify(body.email, body.entered_otp)
    return MessageResponse(message="OTP verified successfully")
