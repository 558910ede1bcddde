"""
Unit tests for Business Model Canvas editing.
"""
import pytest

from founderhub.canvas import CANVAS_TABLE, SECTION_TITLES, CanvasSession, normalize_section
from founderhub.models import CANVAS_SECTIONS
from founderhub.utils.exceptions import AuthenticationError, ValidationError


@pytest.fixture
def canvas(database, auth):
    return CanvasSession(database, auth)


class TestNormalizeSection:

    @pytest.mark.parametrize("name", ["key_partners", "Key Partners", "key-partners", " KEY_PARTNERS "])
    def test_accepted_spellings(self, name):
        assert normalize_section(name) == "key_partners"

    def test_unknown(self):
        with pytest.raises(ValidationError, match="Unknown canvas section"):
            normalize_section("mission")

    def test_every_section_has_title(self):
        assert set(SECTION_TITLES) == set(CANVAS_SECTIONS)


class TestCanvasSession:

    def test_empty_canvas(self, canvas):
        assert canvas.completed_sections == 0
        assert canvas.completion_percentage == 0
        assert canvas.incomplete_sections == list(CANVAS_SECTIONS)

    def test_update_section(self, canvas):
        canvas.update_section("Value Propositions", "Cheaper lab gear")

        assert canvas.section_text("value_propositions") == "Cheaper lab gear"
        assert canvas.is_section_complete("value-propositions")
        assert canvas.has_unsaved_changes
        assert canvas.completed_sections == 1

    def test_whitespace_is_not_complete(self, canvas):
        canvas.update_section("channels", "   ")
        assert not canvas.is_section_complete("channels")

    def test_completion_percentage(self, canvas):
        for section in CANVAS_SECTIONS[:3]:
            canvas.update_section(section, "filled")
        assert canvas.completion_percentage == pytest.approx(100 / 3)

    def test_first_save_inserts_then_updates(self, canvas, database):
        canvas.update_section("channels", "Direct sales")
        canvas.save()

        row = database.tables[CANVAS_TABLE][0]
        assert row["user_id"] == "founder-1"
        assert row["channels"] == "Direct sales"
        assert canvas.canvas_id == row["id"]
        assert not canvas.has_unsaved_changes

        canvas.update_section("cost_structure", "Salaries")
        canvas.save()

        assert len(database.tables[CANVAS_TABLE]) == 1
        assert database.tables[CANVAS_TABLE][0]["cost_structure"] == "Salaries"
        assert database.tables[CANVAS_TABLE][0]["completion_percentage"] == pytest.approx(200 / 9)

    def test_save_requires_user(self, canvas, auth):
        auth.user_id = None
        with pytest.raises(AuthenticationError):
            canvas.save()

    def test_load(self, canvas, database):
        database.tables[CANVAS_TABLE] = [{
            "id": "canvas-1",
            "user_id": "founder-1",
            "key_partners": "Universities",
            "channels": None,
        }]

        assert canvas.load() is True
        assert canvas.canvas_id == "canvas-1"
        assert canvas.section_text("key_partners") == "Universities"
        assert canvas.section_text("channels") == ""

    def test_load_missing_clears_state(self, canvas):
        canvas.update_section("channels", "Direct")
        assert canvas.load() is False
        assert canvas.canvas_id is None
        assert canvas.completed_sections == 0

    def test_reset(self, canvas):
        canvas.update_section("channels", "Direct")
        canvas.save()
        canvas.reset()
        assert canvas.canvas_id is None
        assert canvas.section_text("channels") == ""
