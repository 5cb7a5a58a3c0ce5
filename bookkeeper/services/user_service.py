from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
from bookkeeper.models.user import User
from bookkeeper.core.config import settings
from bookkeeper.core.security import get_password_hash, verify_password
from bookkeeper.common.exceptions import CredentialsRequiredError, InvalidCredentialsError
from bookkeeper.logger_config import logger


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by database ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_mobile(db: Session, mobile: str) -> Optional[User]:
    """Get user by mobile number."""
    return db.query(User).filter(User.mobile == mobile).first()


def get_user_by_user_id(db: Session, user_id: str) -> Optional[User]:
    """Get user by user_id (e.g., 'ADM-ABC12345')."""
    return db.query(User).filter(User.user_id == user_id).first()


def count_users(db: Session) -> int:
    return db.query(User).count()


def create_user(db: Session, mobile: str, password: str, name: str) -> User:
    """Create a new user."""
    if get_user_by_mobile(db, mobile):
        raise ValueError("User with this mobile already exists")

    user_id = User.generate_user_id()
    while get_user_by_user_id(db, user_id):
        user_id = User.generate_user_id()

    user = User(
        user_id=user_id,
        mobile=mobile,
        password_hash=get_password_hash(password),
        name=name,
    )
    db.add(user)

    try:
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating user: {str(e)}")
        raise ValueError("Failed to create user. Mobile may already exist.")


def register_first_user(db: Session, mobile: str, password: str, name: str) -> User:
    """Registration is open only until the first account exists."""
    if count_users(db) > 0:
        raise ValueError("Registration is closed")
    return create_user(db, mobile=mobile, password=password, name=name)


def authenticate_user(db: Session, mobile: str, password: str) -> Optional[User]:
    """Authenticate a user by mobile and password."""
    user = get_user_by_mobile(db, mobile)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def reauthenticate(db: Session, mobile: Optional[str], password: Optional[str]) -> User:
    """
    Fresh credential proof for irreversible operations, checked independently
    of the bearer token that already authenticated the request.
    """
    if not mobile or not password:
        raise CredentialsRequiredError("Mobile and password are required for deletion")

    user = authenticate_user(db, mobile, password)
    if not user:
        logger.warning(f"Re-authentication failed for mobile {mobile}")
        raise InvalidCredentialsError("Invalid credentials. Deletion denied.")
    return user


def ensure_default_admin(db: Session) -> Optional[User]:
    """Create the configured default admin if it does not exist yet."""
    mobile = settings.DEFAULT_ADMIN_MOBILE
    password = settings.DEFAULT_ADMIN_PASSWORD
    if not mobile or not password:
        return None

    user = get_user_by_mobile(db, mobile)
    if user:
        return user

    user = create_user(db, mobile=mobile, password=password, name=settings.DEFAULT_ADMIN_NAME)
    logger.info(f"Default admin created: {user.user_id}")
    return user
