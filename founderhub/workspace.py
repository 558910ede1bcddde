"""
Wiring of services and sessions for one user session.

The CLI builds one Workspace per command; the TUI builds one per app run.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .canvas import CanvasSession
from .dashboard import build_dashboard
from .media.thumbnails import ThumbnailGenerator
from .models import DashboardSummary
from .pitch_deck import PitchDeckSession
from .profile import FundingSession, ProfileOverviewSession
from .services.container import ServiceContainer
from .services.implementations import register_default_services
from .services.interfaces import FileChooserInterface
from .team import TeamSession
from .utils.config import SETTINGS, Settings
from .utils.exceptions import AuthenticationError, FounderHubError, sanitize_error_message

log = logging.getLogger(__name__)


@dataclass
class Workspace:
    """All profile sessions of the signed-in founder, sharing one container."""
    container: ServiceContainer
    settings: Settings
    overview: ProfileOverviewSession
    funding: FundingSession
    pitch_deck: PitchDeckSession
    team: TeamSession
    canvas: CanvasSession

    @classmethod
    def from_container(cls, container: ServiceContainer, settings: Settings = SETTINGS) -> "Workspace":
        database = container.get_database()
        storage = container.get_storage()
        auth = container.get_auth()
        thumbnailer = ThumbnailGenerator(
            container.get_document_renderer(),
            container.get_frame_extractor(),
            settings.thumbnail_dir,
            max_width=settings.thumbnail_max_width,
            quality=settings.thumbnail_quality,
        )
        chooser = (
            container.get_file_chooser()
            if container.is_registered(FileChooserInterface)
            else None
        )
        return cls(
            container=container,
            settings=settings,
            overview=ProfileOverviewSession(database, auth),
            funding=FundingSession(database, storage, auth, settings),
            pitch_deck=PitchDeckSession(
                database, storage, auth, thumbnailer, chooser=chooser, settings=settings
            ),
            team=TeamSession(database, auth),
            canvas=CanvasSession(database, auth),
        )

    @property
    def user_id(self) -> Optional[str]:
        return self.container.get_auth().current_user_id()

    def sign_in(self, email: Optional[str] = None, password: Optional[str] = None) -> str:
        """
        Sign in with the given or configured credentials.

        Raises:
            AuthenticationError: If no credentials are available or sign-in fails
        """
        auth = self.container.get_auth()
        email = email or self.settings.user_email
        password = password or self.settings.user_password
        if self.settings.use_supabase and not (email and password):
            raise AuthenticationError(
                "No credentials. Set FOUNDERHUB_EMAIL and FOUNDERHUB_PASSWORD or pass them explicitly"
            )
        user_id = auth.sign_in(email or "", password or "")
        self.reset()
        return user_id

    def ensure_signed_in(self) -> str:
        user_id = self.user_id
        if user_id:
            return user_id
        return self.sign_in()

    def load(self) -> None:
        """Load every session. The pitch deck handles its own load failures."""
        for name, session in (
            ("profile overview", self.overview),
            ("funding", self.funding),
            ("team", self.team),
            ("canvas", self.canvas),
        ):
            try:
                session.load()
            except FounderHubError as e:
                log.error(f"Failed to load {name}: {sanitize_error_message(e.message)}")
                raise
        self.pitch_deck.load()

    def reset(self) -> None:
        for session in (self.overview, self.funding, self.pitch_deck, self.team, self.canvas):
            session.reset()

    def dashboard(self) -> DashboardSummary:
        return build_dashboard(self.overview, self.pitch_deck, self.team, self.canvas, self.funding)


def open_workspace(
    settings: Settings = SETTINGS,
    container: Optional[ServiceContainer] = None,
) -> Workspace:
    """Build a workspace, registering the default services unless a container is given."""
    if container is None:
        container = register_default_services(ServiceContainer(), settings)
    return Workspace.from_container(container, settings)
