"""
Staged pitch-deck upload workflow.

Files are selected and validated, thumbnailed and staged locally, and only
touch remote storage when the founder submits the deck. Every operation runs
under a single in-flight guard so a second request while one is outstanding
fails fast instead of interleaving.
"""
import dataclasses
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .media.thumbnails import ThumbnailGenerator
from .models import (
    FileValidationFailure,
    OperationState,
    PitchDeckRecord,
    SelectionResult,
    StagedEntry,
    StagedFile,
    SubmissionOutcome,
    SubmissionState,
    SubmissionStatus,
    Thumbnail,
    ThumbnailOutcome,
)
from .services.interfaces import (
    AuthInterface,
    DatabaseInterface,
    FileChooserInterface,
    ObjectStorageInterface,
)
from .state import OperationGuard, StateNotifier
from .utils.config import SETTINGS, Settings
from .utils.exceptions import (
    FounderHubError,
    RemovalError,
    SelectionError,
    SubmissionError,
    ValidationError,
    log_and_reraise,
    sanitize_error_message,
)
from .utils.formatting import content_type_for, pitch_deck_object_key
from .utils.validation import ValidationRules

log = logging.getLogger(__name__)

PITCH_DECK_TABLE = "pitch_decks"

ConfirmCallback = Callable[[StagedFile], bool]


class PitchDeckSession(StateNotifier):
    """
    Owns the staged pitch-deck entries for one editing session.

    Collaborators are injected; construct one session per screen or command.
    """

    def __init__(
        self,
        database: DatabaseInterface,
        storage: ObjectStorageInterface,
        auth: AuthInterface,
        thumbnailer: ThumbnailGenerator,
        chooser: Optional[FileChooserInterface] = None,
        rules: Optional[ValidationRules] = None,
        settings: Settings = SETTINGS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        super().__init__()
        self.database = database
        self.storage = storage
        self.auth = auth
        self.thumbnailer = thumbnailer
        self.chooser = chooser
        self.rules = rules or ValidationRules.for_pitch_deck(settings)
        self.bucket = settings.pitch_deck_bucket
        self._clock = clock

        self._guard = OperationGuard()
        self._entries: Tuple[StagedEntry, ...] = ()
        self._submission = SubmissionState()
        self._deck_id: Optional[Any] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def entries(self) -> Tuple[StagedEntry, ...]:
        return self._entries

    @property
    def files(self) -> List[StagedFile]:
        return [entry.file for entry in self._entries]

    @property
    def thumbnails(self) -> List[Thumbnail]:
        return [entry.thumbnail for entry in self._entries]

    @property
    def file_count(self) -> int:
        return len(self._entries)

    @property
    def is_submitted(self) -> bool:
        return self._submission.is_submitted

    @property
    def submitted_at(self) -> Optional[datetime]:
        return self._submission.submitted_at

    @property
    def deck_id(self) -> Optional[Any]:
        return self._deck_id

    @property
    def operation_state(self) -> OperationState:
        return self._guard.state

    @property
    def is_busy(self) -> bool:
        return self._guard.busy

    @property
    def can_modify(self) -> bool:
        return not self.is_submitted

    @property
    def can_submit(self) -> bool:
        return bool(self._entries) and not self.is_submitted

    # ------------------------------------------------------------------
    # Selection and validation
    # ------------------------------------------------------------------

    def select_files(self, chooser: Optional[FileChooserInterface] = None) -> SelectionResult:
        """
        Ask the chooser for files and validate each one independently.

        A cancelled or empty selection returns a cancelled result. Invalid
        files are reported in `errors` and never block the valid ones.

        Raises:
            SelectionError: If the chooser fails or the deck is already submitted
            OperationInProgressError: If another operation is running
        """
        chooser = chooser or self.chooser
        if chooser is None:
            raise SelectionError("No file chooser configured")

        with self._guard.run(OperationState.SELECTING):
            if self.is_submitted:
                raise SelectionError("Pitch deck has been submitted; files can no longer be added")

            try:
                chosen = chooser.pick_files(True, list(self.rules.allowed_extensions))
            except Exception as e:
                log_and_reraise(log, e, "open file chooser", SelectionError)

            if not chosen:
                log.debug("File selection cancelled")
                return SelectionResult(cancelled=True)

            result = SelectionResult()
            for path in chosen:
                path = Path(path)
                try:
                    result.accepted.append(self.rules.validate(path))
                except ValidationError as e:
                    result.errors.append(FileValidationFailure(path.name, e.message))
                    log.info(f"Rejected {path.name}: {e.message}")

            log.info(f"Selected {len(result.accepted)} file(s), rejected {len(result.errors)}")
            return result

    # ------------------------------------------------------------------
    # Local staging
    # ------------------------------------------------------------------

    def stage(self, valid_files: Sequence[Path]) -> List[ThumbnailOutcome]:
        """
        Thumbnail and append already-validated files, in input order.

        A failed thumbnail degrades to a generic icon; the file is staged
        regardless. Nothing is uploaded here.
        """
        with self._guard.run(OperationState.STAGING):
            if self.is_submitted:
                raise ValidationError("Pitch deck has been submitted; files can no longer be added")

            new_entries = []
            outcomes = []
            for path in valid_files:
                staged = StagedFile.from_path(Path(path))
                outcome = self.thumbnailer.generate(staged)
                if outcome.degraded:
                    log.info(f"Staged {staged.name} with a generic icon")
                new_entries.append(StagedEntry(staged, outcome.thumbnail))
                outcomes.append(outcome)

            self._entries = self._entries + tuple(new_entries)

        log.info(f"Staged {len(new_entries)} file(s); deck now has {self.file_count}")
        self.notify_listeners()
        return outcomes

    def add_files(self, chooser: Optional[FileChooserInterface] = None) -> SelectionResult:
        """Select, validate and stage in one step."""
        result = self.select_files(chooser)
        if result.should_stage:
            self.stage(result.accepted)
        return result

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_file(self, index: int, confirm: Optional[ConfirmCallback] = None) -> bool:
        """
        Remove the entry at `index` after confirmation.

        Only local state changes; objects already in remote storage are left
        in place.

        Returns:
            True if removed, False if the confirmation declined

        Raises:
            RemovalError: If the index is invalid or the deck is submitted
        """
        with self._guard.run(OperationState.REMOVING):
            if self.is_submitted:
                raise RemovalError("Pitch deck has been submitted; files are read-only")
            if not 0 <= index < len(self._entries):
                raise RemovalError(
                    f"No staged file at position {index}",
                    details={"index": index, "count": len(self._entries)},
                )

            entry = self._entries[index]
            if confirm is not None and not confirm(entry.file):
                log.debug(f"Removal of {entry.file.name} cancelled")
                return False

            self._entries = self._entries[:index] + self._entries[index + 1:]

        log.info(f"Removed {entry.file.name} from pitch deck")
        self.notify_listeners()
        return True

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self) -> SubmissionOutcome:
        """
        Upload every staged file, record the deck and mark it submitted.

        The whole submission succeeds or fails as a unit: on any failure the
        objects uploaded by this attempt are removed again and the staged
        entries are left untouched for a retry.

        Raises:
            SubmissionError: If any upload or record write fails
        """
        with self._guard.run(OperationState.SUBMITTING):
            if self.is_submitted:
                return SubmissionOutcome(
                    SubmissionStatus.ALREADY_SUBMITTED,
                    file_count=self.file_count,
                    submitted_at=self.submitted_at,
                )
            if not self._entries:
                log.info("Nothing to submit")
                return SubmissionOutcome(SubmissionStatus.NOTHING_TO_SUBMIT)

            user_id = self.auth.current_user_id()
            if not user_id:
                raise SubmissionError("You must be signed in to submit a pitch deck")

            uploaded_keys: List[str] = []
            try:
                files = self._upload_all(user_id, uploaded_keys)
                submitted_at = self._clock()
                self._write_record(user_id, files, submitted_at)
            except Exception as e:
                self._discard_uploads(uploaded_keys)
                message = sanitize_error_message(
                    e.message if isinstance(e, FounderHubError) else str(e)
                )
                log.error(f"Pitch deck submission failed: {message}")
                raise SubmissionError(f"Pitch deck submission failed: {message}", cause=e) from e

            self._entries = tuple(
                StagedEntry(file, entry.thumbnail) for file, entry in zip(files, self._entries)
            )
            self._submission.mark_submitted(submitted_at)

        log.info(f"Submitted pitch deck with {len(files)} file(s)")
        self.notify_listeners()
        return SubmissionOutcome(
            SubmissionStatus.SUBMITTED,
            file_count=len(files),
            submitted_at=submitted_at,
            file_urls=[f.remote_url for f in files],
        )

    def _upload_all(self, user_id: str, uploaded_keys: List[str]) -> List[StagedFile]:
        files = []
        for index, entry in enumerate(self._entries):
            staged = entry.file
            if staged.is_stored:
                files.append(staged)
                continue

            key = pitch_deck_object_key(
                user_id, index, staged.name, deck_id=self._deck_id, now=self._clock()
            )
            url = self.storage.upload(
                self.bucket, key, staged.path, content_type_for(staged.extension)
            )
            uploaded_keys.append(key)
            files.append(dataclasses.replace(staged, object_key=key, remote_url=url))
            log.debug(f"Uploaded file {index + 1}/{len(self._entries)}")
        return files

    def _write_record(self, user_id: str, files: List[StagedFile], submitted_at: datetime) -> None:
        now = self._clock().isoformat()
        values: Dict[str, Any] = {
            "user_id": user_id,
            "file_urls": [f.remote_url for f in files],
            "file_names": [f.object_key for f in files],
            "original_names": [f.name for f in files],
            "file_count": len(files),
            "is_submitted": True,
            "submission_date": submitted_at.isoformat(),
            "updated_at": now,
        }
        # Files and the submitted flag land in a single write
        if self._deck_id is None:
            row = self.database.insert(PITCH_DECK_TABLE, {**values, "created_at": now})
            self._deck_id = row["id"]
        else:
            self.database.update(PITCH_DECK_TABLE, values, {"id": self._deck_id})

    def _discard_uploads(self, keys: List[str]) -> None:
        if not keys:
            return
        try:
            self.storage.remove(self.bucket, keys)
            log.info(f"Removed {len(keys)} partially uploaded file(s)")
        except FounderHubError as e:
            log.warning(f"Could not remove partial uploads: {sanitize_error_message(e.message)}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> bool:
        """
        Hydrate the deck from its persisted record.

        Stored files get a generic icon keyed by their extension. A failed
        load is logged and leaves an empty deck.

        Returns:
            True if a record was found
        """
        user_id = self.auth.current_user_id()
        if not user_id:
            log.debug("No signed-in user; pitch deck not loaded")
            return False

        with self._guard.run(OperationState.LOADING):
            try:
                row = self.database.select_one(PITCH_DECK_TABLE, {"user_id": user_id})
                record = PitchDeckRecord.model_validate(row) if row else None
            except Exception as e:
                log.error(f"Error loading pitch deck: {sanitize_error_message(str(e))}")
                self._clear()
                record = None
            else:
                if record is None:
                    log.info("No pitch deck record found for user")
                    self._clear()
                else:
                    self._apply_record(record)

        self.notify_listeners()
        return record is not None

    def _apply_record(self, record: PitchDeckRecord) -> None:
        entries = []
        for i, url in enumerate(record.file_urls):
            name = record.file_names[i] if i < len(record.file_names) else None
            original = record.original_names[i] if i < len(record.original_names) else None
            staged = StagedFile.from_stored(url, name, original)
            entries.append(StagedEntry(staged, Thumbnail.generic(staged.extension)))

        self._deck_id = record.id
        self._entries = tuple(entries)
        self._submission = SubmissionState()
        if record.is_submitted:
            if record.submission_date is None:
                log.warning("Submitted pitch deck has no submission date; using load time")
            self._submission.mark_submitted(record.submission_date or self._clock())

        log.info(
            f"Loaded pitch deck: {len(entries)} file(s), submitted={self.is_submitted}"
        )

    def _clear(self) -> None:
        self._entries = ()
        self._submission = SubmissionState()
        self._deck_id = None

    def reset(self) -> None:
        """Drop all local state (sign-out or user change)."""
        self._clear()
        log.debug("Pitch deck session reset")
        self.notify_listeners()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deck_id": self._deck_id,
            "file_count": self.file_count,
            "is_submitted": self.is_submitted,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "files": [entry.file.to_dict() for entry in self._entries],
        }
