"""
Integration tests for the pitch-deck workflow against the local backend.
JSON tables and the directory object store stand in for Supabase.
"""
import pytest

from founderhub.pitch_deck import PITCH_DECK_TABLE
from founderhub.services import (
    DocumentRendererInterface,
    ServiceContainer,
    VideoFrameExtractorInterface,
    register_default_services,
)
from founderhub.utils.file_io import read_json_file
from founderhub.workspace import open_workspace
from tests.fixtures.fake_services import FakeFrameExtractor, FakeRenderer


@pytest.fixture
def local_container(test_settings):
    """Local services with the preview backends replaced so no poppler/ffmpeg is needed."""
    container = register_default_services(ServiceContainer(), test_settings)
    container.register_instance(DocumentRendererInterface, FakeRenderer())
    container.register_instance(VideoFrameExtractorInterface, FakeFrameExtractor())
    return container


def test_submit_persists_files_and_record(local_container, test_settings, deck_files):
    workspace = open_workspace(test_settings, container=local_container)
    workspace.ensure_signed_in()
    workspace.load()

    outcomes = workspace.pitch_deck.stage([deck_files["pdf"], deck_files["mp4"]])
    assert [o.degraded for o in outcomes] == [False, False]

    outcome = workspace.pitch_deck.submit()
    assert outcome.submitted

    bucket_dir = test_settings.local_storage_dir / test_settings.pitch_deck_bucket / "local-founder"
    stored = sorted(p.suffix for p in bucket_dir.iterdir())
    assert stored == [".mp4", ".pdf"]

    rows = read_json_file(test_settings.local_tables_dir / f"{PITCH_DECK_TABLE}.json")
    assert len(rows) == 1
    assert rows[0]["is_submitted"] is True
    assert rows[0]["original_names"] == ["deck.pdf", "demo.mp4"]


def test_reopened_workspace_sees_submitted_deck(local_container, test_settings, deck_files):
    first = open_workspace(test_settings, container=local_container)
    first.ensure_signed_in()
    first.pitch_deck.stage([deck_files["pdf"]])
    first.pitch_deck.submit()

    second = open_workspace(test_settings, container=local_container)
    second.load()

    deck = second.pitch_deck
    assert deck.is_submitted
    assert deck.file_count == 1
    assert deck.files[0].is_stored
    assert deck.thumbnails[0].is_generic
    assert not deck.can_modify


def test_profile_sessions_share_local_tables(local_container, test_settings):
    workspace = open_workspace(test_settings, container=local_container)
    workspace.ensure_signed_in()
    workspace.overview.update_field("company_name", "Acme")
    workspace.overview.save()
    workspace.funding.update_idea_description("Marketplace for used lab equipment")
    workspace.funding.update_funding_goal("250000")
    workspace.funding.update_funding_phase("Seed")
    workspace.funding.save()
    workspace.team.add_member("Ada Lovelace", "CEO")
    workspace.canvas.update_section("channels", "Direct sales")
    workspace.canvas.save()

    reopened = open_workspace(test_settings, container=local_container)
    reopened.load()
    summary = reopened.dashboard()

    assert summary.company_name == "Acme"
    assert summary.funding_goal == 250000
    assert summary.team_member_count == 1
    assert summary.canvas_completed_sections == 1

    rows = read_json_file(test_settings.local_tables_dir / "startup_profiles.json")
    assert len(rows) == 1
    assert rows[0]["funding_stage"] == "Seed"
