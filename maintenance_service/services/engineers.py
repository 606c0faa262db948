"""
Engineer resolution for inspection submissions.

A draft names its engineer by id or by email. Creating a user for an unknown
email is registration, not submission, so it only happens when the resolver
is built with allow_auto_create=True and the draft carries a password.
"""

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from maintenance_service.errors import NotFoundError, ValidationError
from maintenance_service.models.enums import UserRole
from maintenance_service.models.user import User
from maintenance_service.services.catalog import insert_if_absent

logger = logging.getLogger(__name__)


class EngineerResolver:
    """Turns the engineer fields of a draft into a users.user_id."""

    def __init__(self, allow_auto_create: bool = False, hash_rounds: int = 12):
        self.allow_auto_create = allow_auto_create
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=hash_rounds)

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return self.pwd_context.verify(password, password_hash)

    def resolve(self, session: Session, draft) -> int:
        """
        Resolve the engineer of a draft.

        Args:
            session: open session, inside the submission's transaction
            draft: InspectionDraft

        Returns:
            user_id of the engineer

        Raises:
            NotFoundError: the id or email does not match a user
            ValidationError: neither id nor email given, or a password is
                needed to create the user
        """
        if draft.engineer_id is not None:
            if session.get(User, draft.engineer_id) is None:
                raise NotFoundError("Engineer", draft.engineer_id)
            return draft.engineer_id

        email = (draft.engineer_email or "").strip()
        if not email:
            raise ValidationError("Engineer id or email address is required.")

        user_id = self._find_by_email(session, email)
        if user_id is not None:
            return user_id

        if not self.allow_auto_create:
            raise NotFoundError("Engineer", email)
        return self._create(session, email, draft.engineer_name, draft.engineer_password)

    def _find_by_email(self, session: Session, email: str) -> Optional[int]:
        return session.scalar(select(User.user_id).where(User.email == email))

    def _create(self, session: Session, email: str, name: Optional[str], password: Optional[str]) -> int:
        if not (password or "").strip():
            raise ValidationError("Password is required to create new user.")
        full_name = (name or "").strip() or email.split("@")[0]

        created = insert_if_absent(
            session,
            User,
            {
                "username": email.lower(),
                "full_name": full_name,
                "email": email,
                "password_hash": self.hash_password(password.strip()),
                "role": UserRole.ENGINEER.value,
            },
            None,
        )
        user_id = self._find_by_email(session, email)
        if user_id is None:
            # username is unique too; a different email with the same lowercase form
            raise ValidationError(f"Cannot register {email}: the username is already taken.")
        if created:
            logger.info(f"Registered engineer {user_id} <{email}> during submission")
        return user_id
