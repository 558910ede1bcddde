"""Team roster for the startup profile."""
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .models import TeamMember
from .services.interfaces import AuthInterface, DatabaseInterface
from .state import StateNotifier
from .utils.exceptions import AuthenticationError, ValidationError
from .utils.validation import (
    validate_linkedin_url,
    validate_member_name,
    validate_member_role,
)

log = logging.getLogger(__name__)

TEAM_TABLE = "team_members"

LEADERSHIP_ROLES = ("ceo", "cto", "cfo", "co-founder", "founder", "president")

# Team size at which the roster counts as complete
IDEAL_TEAM_SIZE = 3


class TeamSession(StateNotifier):
    """Team members of the signed-in founder, in the order they were added."""

    def __init__(self, database: DatabaseInterface, auth: AuthInterface):
        super().__init__()
        self.database = database
        self.auth = auth
        self._members: List[TeamMember] = []

    @property
    def members(self) -> List[TeamMember]:
        return list(self._members)

    @property
    def has_members(self) -> bool:
        return bool(self._members)

    def _require_user(self) -> str:
        user_id = self.auth.current_user_id()
        if not user_id:
            raise AuthenticationError("No signed-in user")
        return user_id

    def _find(self, member_id: str) -> int:
        for i, member in enumerate(self._members):
            if member.id == member_id:
                return i
        raise ValidationError("Team member not found", details={"id": member_id})

    def load(self) -> int:
        user_id = self.auth.current_user_id()
        if not user_id:
            log.debug("No signed-in user; team not loaded")
            return 0
        rows = self.database.select_many(TEAM_TABLE, {"user_id": user_id}, order_by="created_at")
        self._members = [TeamMember.from_record(row) for row in rows]
        log.info(f"Loaded {len(self._members)} team member(s)")
        self.notify_listeners()
        return len(self._members)

    def add_member(self, name: str, role: str, linkedin: Optional[str] = None) -> TeamMember:
        """
        Validate and persist a new team member.

        Raises:
            ValidationError: On invalid fields or a duplicate name
        """
        name = validate_member_name(name)
        role = validate_member_role(role)
        linkedin = validate_linkedin_url(linkedin)

        if any(m.name.lower() == name.lower() for m in self._members):
            raise ValidationError("A team member with this name already exists")

        user_id = self._require_user()
        row = self.database.insert(TEAM_TABLE, {
            "user_id": user_id,
            "name": name,
            "role": role,
            "linkedin_url": linkedin,
            "avatar_url": "",
            "created_at": datetime.now().isoformat(),
        })
        member = TeamMember.from_record(row)
        self._members.append(member)
        log.info(f"Added team member {member.name}")
        self.notify_listeners()
        return member

    def import_members(self, members: Iterable[Dict[str, Any]]) -> List[TeamMember]:
        """Add several members; stops at the first invalid one."""
        added = []
        for data in members:
            added.append(self.add_member(
                data.get("name", ""),
                data.get("role", ""),
                data.get("linkedin_url") or data.get("linkedin"),
            ))
        return added

    def remove_member(self, member_id: str) -> TeamMember:
        index = self._find(member_id)
        self.database.delete(TEAM_TABLE, {"id": member_id})
        member = self._members.pop(index)
        log.info(f"Removed team member {member.name}")
        self.notify_listeners()
        return member

    def update_member(
        self,
        member_id: str,
        name: Optional[str] = None,
        role: Optional[str] = None,
        linkedin: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> TeamMember:
        index = self._find(member_id)
        current = self._members[index]

        changes: Dict[str, Any] = {}
        if name is not None:
            changes["name"] = validate_member_name(name)
            if any(
                m.id != member_id and m.name.lower() == changes["name"].lower()
                for m in self._members
            ):
                raise ValidationError("A team member with this name already exists")
        if role is not None:
            changes["role"] = validate_member_role(role)
        if linkedin is not None:
            changes["linkedin_url"] = validate_linkedin_url(linkedin)
        if avatar_url is not None:
            changes["avatar_url"] = avatar_url

        if not changes:
            return current

        self.database.update(
            TEAM_TABLE,
            {**changes, "updated_at": datetime.now().isoformat()},
            {"id": member_id},
        )
        updated = current.model_copy(update=changes)
        self._members[index] = updated
        log.info(f"Updated team member {updated.name}")
        self.notify_listeners()
        return updated

    def members_by_role(self, role: str) -> List[TeamMember]:
        needle = role.lower()
        return [m for m in self._members if needle in m.role.lower()]

    @property
    def leadership_team(self) -> List[TeamMember]:
        return [
            m for m in self._members
            if any(r in m.role.lower() for r in LEADERSHIP_ROLES)
        ]

    @property
    def completion_percentage(self) -> float:
        if not self._members:
            return 0.0
        if len(self._members) >= IDEAL_TEAM_SIZE:
            return 100.0
        return len(self._members) / IDEAL_TEAM_SIZE * 100

    def summary(self) -> Dict[str, Any]:
        roles = Counter(m.role.lower() for m in self._members)
        return {
            "total_members": len(self._members),
            "leadership_count": len(self.leadership_team),
            "role_distribution": dict(roles),
            "has_founder": any(
                "founder" in m.role.lower() or "ceo" in m.role.lower()
                for m in self._members
            ),
        }

    def export(self) -> Dict[str, Any]:
        return {
            "team_members": [m.to_record() for m in self._members],
            "team_count": len(self._members),
            "leadership_count": len(self.leadership_team),
            "exported_at": datetime.now().isoformat(),
        }

    def reset(self) -> None:
        self._members = []
        self.notify_listeners()
