"""Authentication routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.deps import get_current_user
from app.core.security import verify_password, get_password_hash, create_user_token
from app.core.time import utc_now
from app.models.user import User
from app.schemas.user import AuthUser, LoginRequest, SignupRequest, Token, User as UserSchema

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/signup", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def signup(signup_data: SignupRequest, db: Session = Depends(get_db)):
    """Create a regular (non-admin) account."""
    existing = db.query(User).filter(User.email == signup_data.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists"
        )

    user = User(
        email=signup_data.email,
        name=signup_data.name,
        password_hash=get_password_hash(signup_data.password),
        is_admin=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s", user.id)
    return user


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Login endpoint."""
    user = db.query(User).filter(User.email == login_data.email).first()

    if not user or not verify_password(login_data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    user.last_login = utc_now()
    db.commit()

    access_token = create_user_token(user.id, user.email, user.is_admin)
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=AuthUser)
def get_me(current_user: User = Depends(get_current_user)):
    """Session identity of the caller."""
    return current_user
