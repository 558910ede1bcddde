"""Read-only aggregation of the profile sessions for the founder dashboard."""
import logging
from typing import Optional

from .canvas import CanvasSession
from .models import DashboardSummary
from .pitch_deck import PitchDeckSession
from .profile import FundingSession, ProfileOverviewSession
from .team import TeamSession

log = logging.getLogger(__name__)


def build_dashboard(
    overview: ProfileOverviewSession,
    pitch_deck: PitchDeckSession,
    team: TeamSession,
    canvas: CanvasSession,
    funding: Optional[FundingSession] = None,
) -> DashboardSummary:
    """
    Combine the sessions into one summary.

    Only public session properties are read; nothing is mutated.
    """
    profile = overview.profile
    summary = DashboardSummary(
        company_name=profile.company_name,
        tagline=profile.tagline,
        industry=profile.industry,
        region=profile.region,
        profile_completion=overview.completion_percentage,
        pitch_deck_file_count=pitch_deck.file_count,
        pitch_deck_submitted=pitch_deck.is_submitted,
        pitch_deck_submitted_at=pitch_deck.submitted_at,
        team_member_count=len(team.members),
        leadership=[f"{m.name} ({m.role})" for m in team.leadership_team],
        team_completion=team.completion_percentage,
        canvas_completed_sections=canvas.completed_sections,
        canvas_completion=canvas.completion_percentage,
    )
    if funding is not None:
        summary.funding_goal = funding.profile.funding_goal
        summary.funding_phase = funding.profile.funding_phase

    log.debug(
        f"Dashboard built: deck={summary.pitch_deck_file_count} file(s), "
        f"team={summary.team_member_count}, canvas={summary.canvas_completed_sections}/9"
    )
    return summary
