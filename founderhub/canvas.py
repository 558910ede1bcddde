"""Business Model Canvas editing and completion tracking."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import CANVAS_SECTIONS, BusinessModelCanvas
from .services.interfaces import AuthInterface, DatabaseInterface
from .state import StateNotifier
from .utils.exceptions import AuthenticationError, ValidationError

log = logging.getLogger(__name__)

CANVAS_TABLE = "business_model_canvas"

SECTION_TITLES = {
    "key_partners": "Key Partners",
    "key_activities": "Key Activities",
    "key_resources": "Key Resources",
    "value_propositions": "Value Propositions",
    "customer_relationships": "Customer Relationships",
    "customer_segments": "Customer Segments",
    "channels": "Channels",
    "cost_structure": "Cost Structure",
    "revenue_streams": "Revenue Streams",
}


def normalize_section(name: str) -> str:
    """Accept `key-partners`, `Key Partners` or `key_partners`."""
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    if key not in CANVAS_SECTIONS:
        raise ValidationError(
            f"Unknown canvas section: {name}",
            details={"allowed": list(CANVAS_SECTIONS)},
        )
    return key


class CanvasSession(StateNotifier):
    """The founder's canvas: nine text sections, saved as one record."""

    def __init__(self, database: DatabaseInterface, auth: AuthInterface):
        super().__init__()
        self.database = database
        self.auth = auth
        self.canvas = BusinessModelCanvas()
        self._canvas_id: Optional[Any] = None
        self._dirty: set = set()

    @property
    def canvas_id(self) -> Optional[Any]:
        return self._canvas_id

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._dirty)

    def load(self) -> bool:
        user_id = self.auth.current_user_id()
        if not user_id:
            return False
        row = self.database.select_one(CANVAS_TABLE, {"user_id": user_id})
        if row:
            self._canvas_id = row.get("id")
            self.canvas = BusinessModelCanvas(
                **{s: row.get(s) or "" for s in CANVAS_SECTIONS}
            )
            log.info(f"Canvas loaded ({self.completed_sections}/{len(CANVAS_SECTIONS)} sections)")
        else:
            self._canvas_id = None
            self.canvas = BusinessModelCanvas()
        self._dirty.clear()
        self.notify_listeners()
        return row is not None

    def update_section(self, name: str, text: str) -> None:
        section = normalize_section(name)
        setattr(self.canvas, section, text or "")
        self._dirty.add(section)
        self.notify_listeners()

    def section_text(self, name: str) -> str:
        return getattr(self.canvas, normalize_section(name))

    def is_section_complete(self, name: str) -> bool:
        return self.canvas.is_section_complete(normalize_section(name))

    @property
    def completed_sections(self) -> int:
        return self.canvas.completed_sections

    @property
    def completion_percentage(self) -> float:
        return self.canvas.completion_percentage

    @property
    def incomplete_sections(self) -> List[str]:
        return [s for s in CANVAS_SECTIONS if not self.canvas.is_section_complete(s)]

    def save(self) -> None:
        """Create the record on first save and update it afterwards."""
        user_id = self.auth.current_user_id()
        if not user_id:
            raise AuthenticationError("No signed-in user")

        now = datetime.now().isoformat()
        values: Dict[str, Any] = {s: getattr(self.canvas, s) for s in CANVAS_SECTIONS}
        values["completion_percentage"] = self.completion_percentage
        values["updated_at"] = now

        if self._canvas_id is None:
            row = self.database.insert(CANVAS_TABLE, {"user_id": user_id, "created_at": now, **values})
            self._canvas_id = row["id"]
            log.info("Created canvas record")
        else:
            self.database.update(CANVAS_TABLE, values, {"id": self._canvas_id})
            log.info("Updated canvas record")

        self._dirty.clear()
        self.notify_listeners()

    def reset(self) -> None:
        self.canvas = BusinessModelCanvas()
        self._canvas_id = None
        self._dirty.clear()
        self.notify_listeners()
