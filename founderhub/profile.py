"""Company overview and funding details for the startup profile."""
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Set, Union

from .models import CompanyProfile, FundingProfile
from .services.interfaces import AuthInterface, DatabaseInterface, ObjectStorageInterface
from .state import StateNotifier
from .utils.config import SETTINGS, Settings
from .utils.exceptions import (
    AuthenticationError,
    ErrorContext,
    StorageError,
    ValidationError,
    sanitize_path,
)
from .utils.formatting import avatar_object_key, content_type_for
from .utils.validation import (
    ValidationRules,
    get_extension,
    parse_funding_goal,
    validate_funding_goal,
    validate_funding_phase,
    validate_idea_description,
)

log = logging.getLogger(__name__)

PROFILE_TABLE = "startup_profiles"

OVERVIEW_FIELDS = ("company_name", "tagline", "industry", "region")


class _ProfileRecordSession(StateNotifier):
    """Shared load/upsert against the profile row keyed by `startup_id`."""

    def __init__(self, database: DatabaseInterface, auth: AuthInterface):
        super().__init__()
        self.database = database
        self.auth = auth
        self._dirty: Set[str] = set()

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._dirty)

    def _require_user(self) -> str:
        user_id = self.auth.current_user_id()
        if not user_id:
            raise AuthenticationError("No signed-in user")
        return user_id

    def _fetch(self) -> Optional[Dict[str, Any]]:
        user_id = self.auth.current_user_id()
        if not user_id:
            return None
        return self.database.select_one(PROFILE_TABLE, {"startup_id": user_id})

    def _upsert(self, values: Dict[str, Any]) -> None:
        user_id = self._require_user()
        values = {**values, "updated_at": datetime.now().isoformat()}
        existing = self.database.select_one(PROFILE_TABLE, {"startup_id": user_id})
        if existing:
            self.database.update(PROFILE_TABLE, values, {"startup_id": user_id})
        else:
            self.database.insert(PROFILE_TABLE, {"startup_id": user_id, **values})


class ProfileOverviewSession(_ProfileRecordSession):
    """Company name, tagline, industry and region."""

    def __init__(self, database: DatabaseInterface, auth: AuthInterface):
        super().__init__(database, auth)
        self.profile = CompanyProfile()

    def load(self) -> bool:
        row = self._fetch()
        if row:
            self.profile = CompanyProfile(
                **{name: row.get(name) or "" for name in OVERVIEW_FIELDS}
            )
            log.info("Profile overview loaded")
        else:
            self.profile = CompanyProfile()
            log.info("No profile overview found")
        self._dirty.clear()
        self.notify_listeners()
        return row is not None

    def update_field(self, name: str, value: str) -> None:
        if name not in OVERVIEW_FIELDS:
            raise ValidationError(f"Unknown profile field: {name}")
        setattr(self.profile, name, value or "")
        self._dirty.add(name)
        self.notify_listeners()

    def save(self) -> None:
        values = {name: getattr(self.profile, name).strip() for name in OVERVIEW_FIELDS}
        self._upsert(values)
        self._dirty.clear()
        log.info("Profile overview saved")
        self.notify_listeners()

    @property
    def completion_percentage(self) -> float:
        filled = sum(1 for name in OVERVIEW_FIELDS if getattr(self.profile, name).strip())
        return filled / len(OVERVIEW_FIELDS) * 100

    @property
    def is_complete(self) -> bool:
        return all(getattr(self.profile, name).strip() for name in OVERVIEW_FIELDS)

    def reset(self) -> None:
        self.profile = CompanyProfile()
        self._dirty.clear()
        self.notify_listeners()


class FundingSession(_ProfileRecordSession):
    """
    Idea description, funding goal, funding phase and profile avatar.

    Setters store what the founder typed; `validation_errors()` reports
    what is wrong with it and `save()` refuses to persist invalid input.
    """

    def __init__(
        self,
        database: DatabaseInterface,
        storage: ObjectStorageInterface,
        auth: AuthInterface,
        settings: Settings = SETTINGS,
    ):
        super().__init__(database, auth)
        self.storage = storage
        self.settings = settings
        self.profile = FundingProfile()
        self._funding_goal_input = ""

    def load(self) -> bool:
        row = self._fetch()
        if row:
            self.profile = FundingProfile(
                idea_description=row.get("idea_description") or "",
                funding_goal=parse_funding_goal(row.get("funding_goal")),
                funding_phase=row.get("funding_stage") or None,
                avatar_url=row.get("avatar_url") or None,
            )
            log.info("Funding details loaded")
        else:
            self.profile = FundingProfile()
        goal = self.profile.funding_goal
        self._funding_goal_input = f"{goal:,}" if goal is not None else ""
        self._dirty.clear()
        self.notify_listeners()
        return row is not None

    def update_idea_description(self, value: str) -> None:
        self.profile.idea_description = value or ""
        self._dirty.add("idea_description")
        self.notify_listeners()

    def update_funding_goal(self, value: Union[str, int, None]) -> None:
        self._funding_goal_input = "" if value is None else str(value)
        self.profile.funding_goal = parse_funding_goal(value)
        self._dirty.add("funding_goal")
        self.notify_listeners()

    def update_funding_phase(self, value: Optional[str]) -> None:
        self.profile.funding_phase = value or None
        self._dirty.add("funding_phase")
        self.notify_listeners()

    def validation_errors(self) -> Dict[str, str]:
        errors = {}
        checks = (
            ("idea_description", validate_idea_description, self.profile.idea_description),
            ("funding_goal", validate_funding_goal, self._funding_goal_input),
            ("funding_phase", validate_funding_phase, self.profile.funding_phase),
        )
        for field_name, validator, value in checks:
            try:
                validator(value)
            except ValidationError as e:
                errors[field_name] = e.message
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()

    @property
    def completion_percentage(self) -> float:
        done = 3 - len(self.validation_errors())
        if self.profile.avatar_url:
            done += 1
        return done / 4 * 100

    def save(self) -> None:
        """
        Persist funding details.

        Raises:
            ValidationError: If any field is invalid; nothing is written
        """
        errors = self.validation_errors()
        if errors:
            raise ValidationError(
                "; ".join(errors.values()),
                details={"fields": sorted(errors)},
            )
        self._upsert({
            "idea_description": self.profile.idea_description.strip(),
            "funding_goal": self.profile.funding_goal,
            "funding_stage": self.profile.funding_phase,
        })
        self._dirty.clear()
        log.info("Funding details saved")
        self.notify_listeners()

    def upload_avatar(self, path: Union[str, Path]) -> str:
        """
        Validate and upload a profile image, then store its URL.

        Raises:
            ValidationError: If the image is missing, too large or not an image
            StorageError: If the upload fails
        """
        user_id = self._require_user()
        rules = ValidationRules.for_avatar(self.settings)
        path = rules.validate(path)

        key = avatar_object_key(user_id, path.name)
        with ErrorContext("upload avatar", log, StorageError):
            url = self.storage.upload(
                self.settings.avatar_bucket, key, path, content_type_for(get_extension(path.name))
            )
        self._upsert({"avatar_url": url})
        self.profile.avatar_url = url
        log.info(f"Avatar uploaded from {sanitize_path(path)}")
        self.notify_listeners()
        return url

    def reset(self) -> None:
        self.profile = FundingProfile()
        self._funding_goal_input = ""
        self._dirty.clear()
        self.notify_listeners()
