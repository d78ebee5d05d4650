
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.user import UserCreate, UserLogin, UserOut, UserEnvelope, MeOut
from app.schemas.password_reset import ForgotPasswordIn, ResetPasswordIn, VerifyTokenOut
from app.utils.auth import get_session_id
from app.utils.email import MailDeliveryError, build_reset_url, render_reset_email, send_email
from app.utils.hashing import verify_password
from app.utils.password_reset import (
    EXPIRED,
    PasswordReuseError,
    ResetTokenError,
    consume_reset_token,
    issue_reset_token,
    validate_reset_token,
)
from app.utils.sessions import (
    INACTIVE_STATUSES,
    clear_session_cookie,
    issue_session,
    resolve_session,
    revoke_session,
    set_session_cookie,
)
from app.utils.users import EmailAlreadyRegistered, create_user, get_user_by_email

import logging
logger = logging.getLogger("app.auth")


router = APIRouter(prefix="/api/auth", tags=["Auth"])

# same body whether or not the address is registered
FORGOT_PASSWORD_ACK = {"detail": "If your email is registered, you will receive a password reset link"}


def _token_error(exc: ResetTokenError) -> HTTPException:
    if exc.reason == EXPIRED:
        return HTTPException(status_code=400, detail="Token has expired")
    return HTTPException(status_code=400, detail="Invalid or expired token")


@router.post("/signup", response_model=UserEnvelope, status_code=201)
def signup(body: UserCreate, db: Session = Depends(get_db)):
    try:
        user = create_user(db, body.email, body.password, body.name)
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="Email already in use")
    return {"detail": "User created successfully", "user": UserOut.model_validate(user)}


@router.post("/login", response_model=UserEnvelope)
def login(body: UserLogin, response: Response, db: Session = Depends(get_db)):
    user = get_user_by_email(db, body.email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if not verify_password(body.password, user.password_hash):
        logger.info("login failed user_id=%s", user.id)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if user.status in INACTIVE_STATUSES:
        logger.warning("login refused user_id=%s status=%s", user.id, user.status.value)
        raise HTTPException(status_code=403, detail="Account is not active")

    session = issue_session(db, user.id)
    set_session_cookie(response, session)
    return {"detail": "Login successful", "user": UserOut.model_validate(user)}


@router.get("/me", response_model=MeOut)
def me(request: Request, db: Session = Depends(get_db)):
    session_id = get_session_id(request)
    user = resolve_session(db, session_id)
    if user is None:
        resp = JSONResponse(status_code=401, content={"user": None})
        if session_id:
            clear_session_cookie(resp)
        return resp
    return {"user": UserOut.model_validate(user)}


@router.post("/logout")
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    revoke_session(db, get_session_id(request))
    clear_session_cookie(response)
    return {"detail": "Logged out successfully"}


def send_reset_email(to: str, token: str, user_id: str) -> None:
    # runs after the response; the token stays valid even if delivery fails
    try:
        send_email(
            to=to,
            subject="Reset Your Password - AbiNote",
            html=render_reset_email(build_reset_url(token)),
        )
    except MailDeliveryError:
        logger.exception("failed to send reset email user_id=%s", user_id)


@router.post("/forgot-password")
def forgot_password(body: ForgotPasswordIn, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    user = get_user_by_email(db, body.email)
    if not user:
        logger.info("password reset requested for unknown email")
        return FORGOT_PASSWORD_ACK

    token = issue_reset_token(db, user.id)
    # mail is not sent inline so a known address answers as fast as an unknown one
    background_tasks.add_task(send_reset_email, user.email, token, user.id)
    return FORGOT_PASSWORD_ACK


@router.get("/verify-token", response_model=VerifyTokenOut)
def verify_token(token: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if not token:
        raise HTTPException(status_code=400, detail="Token is required")
    try:
        _, email = validate_reset_token(db, token)
    except ResetTokenError as exc:
        raise _token_error(exc)
    return VerifyTokenOut(valid=True, email=email)


@router.post("/reset-password")
def reset_password(body: ResetPasswordIn, db: Session = Depends(get_db)):
    try:
        consume_reset_token(db, body.token, body.password)
    except ResetTokenError as exc:
        raise _token_error(exc)
    except PasswordReuseError:
        raise HTTPException(status_code=400, detail="New password cannot be the same as your current password")
    return {"detail": "Password has been reset successfully"}
