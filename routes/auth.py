from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from motor.motor_asyncio import AsyncIOMotorDatabase
from database.mongodb import get_database
from config import Settings, get_settings
from models.user import VendorSignup, ClientSignup, User, Token
from services.auth_deps import get_current_user, paused_account_exception
from services.auth_service import verify_password, create_access_token
from services.account_service import (
    AccountService,
    AccountPaused,
    EmailAlreadyRegistered,
    SignupTokenInvalid,
    check_login_allowed,
)
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _token_response(user_doc: dict) -> Token:
    access_token = create_access_token(data={"sub": user_doc["_id"]})
    return Token(access_token=access_token, user=User.from_doc(user_doc))


@router.post("/signup/vendor", response_model=Token)
async def signup_vendor(
    data: VendorSignup,
    db: AsyncIOMotorDatabase = Depends(get_database),
    settings: Settings = Depends(get_settings)
):
    """Create a vendor (or admin) account with a one-time signup token"""
    try:
        user_doc = await AccountService(db).register_with_token(data, settings.default_country)
    except SignupTokenInvalid as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    return _token_response(user_doc)


@router.post("/signup/client", response_model=Token)
async def signup_client(data: ClientSignup, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Create a client (buyer) account"""
    try:
        user_doc = await AccountService(db).register_client(data)
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    return _token_response(user_doc)


@router.post("/login", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncIOMotorDatabase = Depends(get_database)):
    """Login with email and password; paused accounts are turned away with the operator's remark"""
    user_doc = await db.users.find_one({"email": form_data.username})
    if not user_doc or not verify_password(form_data.password, user_doc["hashed_password"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        check_login_allowed(user_doc)
    except AccountPaused as e:
        logger.info(f"Login refused for paused account: {user_doc['email']}")
        raise paused_account_exception(e.remark)

    logger.info(f"User logged in: {user_doc['email']}")
    return _token_response(user_doc)


@router.get("/me", response_model=User)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return current_user
