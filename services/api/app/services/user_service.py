import logging

from sqlalchemy.orm import Session

from app import models, schemas
from app.core.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from app.core.patch import patch_fields
from app.core.security import hash_password, password_problem, verify_password
from app.core.text import normalize_email
from app.services.collaboration_service import CollaborationService

logger = logging.getLogger("listly.users")


class UserService:
    def __init__(self, db: Session):
        self.db = db

    # --- accounts ---

    def register(self, data: schemas.RegisterRequest) -> models.User:
        email = normalize_email(data.email)
        problem = password_problem(data.password)
        if problem:
            raise ValidationError(problem, details=[{"field": "password", "message": problem}])
        if self.db.query(models.User).filter(models.User.email == email).first():
            raise ConflictError("An account with this email already exists", code="EMAIL_EXISTS")

        user = models.User(
            email=email,
            name=data.name.strip(),
            password_hash=hash_password(data.password),
            provider="EMAIL",
        )
        user.preferences = models.UserPreferences()
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("user %s registered", user.id)

        CollaborationService(self.db).accept_pending_invitations(user)
        return user

    def authenticate(self, email: str, password: str) -> models.User:
        user = self.db.query(models.User).filter(models.User.email == normalize_email(email)).first()
        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            raise UnauthorizedError("Account is disabled")
        return user

    def get_active(self, user_id: str) -> models.User | None:
        user = self.db.get(models.User, user_id)
        if user is None or not user.is_active:
            return None
        return user

    # --- profile ---

    def get_profile(self, user_id: str) -> models.User:
        user = self.db.get(models.User, user_id)
        if not user:
            raise NotFoundError("User")
        return user

    def update_profile(self, user_id: str, data: schemas.UserUpdate) -> models.User:
        user = self.get_profile(user_id)
        for field, value in patch_fields(data).items():
            setattr(user, field, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_account(self, user_id: str) -> None:
        user = self.get_profile(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info("user %s deleted their account", user_id)

    # --- preferences ---

    def get_preferences(self, user_id: str) -> models.UserPreferences:
        user = self.get_profile(user_id)
        if user.preferences is None:
            user.preferences = models.UserPreferences()
            self.db.commit()
            self.db.refresh(user)
        return user.preferences

    def update_preferences(self, user_id: str, data: schemas.PreferencesUpdate) -> models.UserPreferences:
        prefs = self.get_preferences(user_id)
        for field, value in patch_fields(data).items():
            setattr(prefs, field, value)
        self.db.commit()
        self.db.refresh(prefs)
        return prefs
