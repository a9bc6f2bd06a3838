"""List sharing.

Sharing with an email that already has an account adds a collaborator row
right away; otherwise a ListInvitation is stored and turned into a
collaborator when that email registers.
"""

import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app import models
from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.core.security import new_token
from app.core.text import normalize_email
from app.settings import settings
from app.services.access import (
    DEFAULT_COLLABORATOR_ROLE,
    OWNER,
    can_manage_collaborators,
    get_list_with_role,
    require,
)

logger = logging.getLogger("listly.collaboration")


def _collaborator_row(user: models.User, role: str, joined_at) -> dict:
    return {"user_id": user.id, "role": role, "joined_at": joined_at, "user": user}


class CollaborationService:
    def __init__(self, db: Session):
        self.db = db

    def share(self, list_id: str, owner_id: str, target_email: str, role: Optional[str] = None) -> dict:
        shopping_list, requester_role = get_list_with_role(self.db, list_id, owner_id)
        require(can_manage_collaborators(requester_role), "Only the owner or an admin can share this list")

        role = role or DEFAULT_COLLABORATOR_ROLE
        email = normalize_email(target_email)

        count = self.db.query(func.count(models.ListCollaborator.id)).filter(
            models.ListCollaborator.list_id == list_id
        ).scalar()
        if count >= settings.max_collaborators_per_list:
            raise ValidationError(
                f"A list can have at most {settings.max_collaborators_per_list} collaborators"
            )

        target = self.db.query(models.User).filter(models.User.email == email).first()
        if target is None:
            return self._invite(shopping_list, email, role, owner_id)

        if target.id == shopping_list.owner_id:
            raise ValidationError("Cannot share a list with its owner")
        existing = self.db.query(models.ListCollaborator).filter(
            models.ListCollaborator.list_id == list_id,
            models.ListCollaborator.user_id == target.id,
        ).first()
        if existing:
            raise ValidationError("User is already a collaborator on this list")

        collab = models.ListCollaborator(list_id=list_id, user_id=target.id, role=role)
        self.db.add(collab)
        self.db.commit()
        self.db.refresh(collab)
        logger.info("list %s shared with %s as %s", list_id, target.id, role)
        return {"status": "added", "collaborator": _collaborator_row(target, collab.role, collab.joined_at)}

    def _invite(self, shopping_list: models.ShoppingList, email: str, role: str, invited_by_id: str) -> dict:
        invitation = self.db.query(models.ListInvitation).filter(
            models.ListInvitation.list_id == shopping_list.id,
            models.ListInvitation.email == email,
            models.ListInvitation.accepted_at.is_(None),
        ).first()
        expires_at = models.utcnow() + timedelta(days=settings.invitation_expiry_days)
        if invitation:
            # Re-sharing refreshes the pending invite
            invitation.role = role
            invitation.expires_at = expires_at
        else:
            invitation = models.ListInvitation(
                list_id=shopping_list.id,
                email=email,
                role=role,
                token=new_token(),
                invited_by_id=invited_by_id,
                expires_at=expires_at,
            )
            self.db.add(invitation)
        self.db.commit()
        self.db.refresh(invitation)
        logger.info("invitation for list %s stored for %s", shopping_list.id, email)
        return {"status": "invited", "invitation": invitation}

    def get_collaborators(self, list_id: str, user_id: str) -> list[dict]:
        shopping_list, _ = get_list_with_role(self.db, list_id, user_id)
        rows = [_collaborator_row(shopping_list.owner, OWNER, shopping_list.created_at)]
        rows.extend(_collaborator_row(c.user, c.role, c.joined_at) for c in shopping_list.collaborators)
        return rows

    def update_role(self, list_id: str, user_id: str, collaborator_id: str, role: str) -> dict:
        _, requester_role = get_list_with_role(self.db, list_id, user_id)
        require(can_manage_collaborators(requester_role), "Only the owner or an admin can change roles")

        collab = self._get_collaborator(list_id, collaborator_id)
        if requester_role != OWNER and collab.role == "ADMIN" and collab.user_id != user_id:
            raise ForbiddenError("Only the owner can change another admin's role")
        collab.role = role
        self.db.commit()
        self.db.refresh(collab)
        return _collaborator_row(collab.user, collab.role, collab.joined_at)

    def remove_collaborator(self, list_id: str, user_id: str, collaborator_id: str) -> None:
        """Remove a collaborator, or leave the list when removing yourself."""
        _, requester_role = get_list_with_role(self.db, list_id, user_id)
        if collaborator_id != user_id:
            require(can_manage_collaborators(requester_role), "Only the owner or an admin can remove collaborators")

        collab = self._get_collaborator(list_id, collaborator_id)
        self.db.delete(collab)
        self.db.commit()
        logger.info("user %s removed from list %s", collaborator_id, list_id)

    def accept_pending_invitations(self, user: models.User) -> int:
        now = models.utcnow()
        invitations = self.db.query(models.ListInvitation).filter(
            models.ListInvitation.email == user.email,
            models.ListInvitation.accepted_at.is_(None),
        ).all()

        accepted = 0
        for invitation in invitations:
            expires_at = invitation.expires_at
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=now.tzinfo)
            if expires_at < now:
                continue
            already = self.db.query(models.ListCollaborator).filter(
                models.ListCollaborator.list_id == invitation.list_id,
                models.ListCollaborator.user_id == user.id,
            ).first()
            if not already:
                self.db.add(models.ListCollaborator(
                    list_id=invitation.list_id, user_id=user.id, role=invitation.role
                ))
            invitation.accepted_at = now
            accepted += 1
        if accepted:
            self.db.commit()
            logger.info("user %s accepted %d pending invitation(s)", user.id, accepted)
        return accepted

    def _get_collaborator(self, list_id: str, collaborator_id: str) -> models.ListCollaborator:
        collab = self.db.query(models.ListCollaborator).filter(
            models.ListCollaborator.list_id == list_id,
            models.ListCollaborator.user_id == collaborator_id,
        ).first()
        if not collab:
            raise NotFoundError("Collaborator")
        return collab
