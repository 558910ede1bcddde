"""
Pytest configuration and shared fixtures for FounderHub tests.
"""
import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import logging

from PIL import Image

from founderhub.media.thumbnails import ThumbnailGenerator
from founderhub.pitch_deck import PitchDeckSession
from founderhub.services.container import ServiceContainer
from founderhub.services.interfaces import (
    AuthInterface,
    DatabaseInterface,
    DocumentRendererInterface,
    ObjectStorageInterface,
    VideoFrameExtractorInterface,
)
from founderhub.utils.config import Settings
from founderhub.utils.validation import ValidationRules
from tests.fixtures.fake_services import (
    FIXED_NOW,
    FakeAuth,
    FakeFrameExtractor,
    FakeRenderer,
    InMemoryDatabase,
    RecordingStorage,
)

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Disable logging during tests unless specifically needed
logging.getLogger('founderhub').setLevel(logging.WARNING)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="founderhub_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def deck_files(temp_dir):
    """Sample files a founder might pick for a pitch deck."""
    files = {}
    samples = {
        "pdf": ("deck.pdf", b"%PDF-1.4 fake deck"),
        "mp4": ("demo.mp4", b"fake video data"),
        "mov": ("walkthrough.mov", b"fake quicktime data"),
        "txt": ("notes.txt", b"some notes"),
    }
    for key, (name, payload) in samples.items():
        path = temp_dir / name
        path.write_bytes(payload)
        files[key] = path
    return files


@pytest.fixture
def avatar_file(temp_dir):
    path = temp_dir / "avatar.png"
    Image.new("RGB", (32, 32), "blue").save(path, "PNG")
    return path


@pytest.fixture
def test_settings(temp_dir):
    """Settings pointing every directory into the temp dir, local backend."""
    return Settings(
        storage_mode="local",
        data_dir=temp_dir / "data",
        thumbnail_dir=temp_dir / "data" / "thumbnails",
        local_storage_dir=temp_dir / "data" / "storage",
        local_tables_dir=temp_dir / "data" / "tables",
        local_user_id="local-founder",
    )


@pytest.fixture
def database():
    return InMemoryDatabase()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def auth():
    return FakeAuth()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def frame_extractor():
    return FakeFrameExtractor()


@pytest.fixture
def thumbnailer(renderer, frame_extractor, temp_dir):
    return ThumbnailGenerator(renderer, frame_extractor, temp_dir / "thumbs")


@pytest.fixture
def deck_rules():
    """Pitch-deck rules without txt, limited to 1 KB so size checks are cheap."""
    return ValidationRules("Pitch deck", ["pdf", "mp4", "avi", "mov", "mkv", "wmv"], 1024)


@pytest.fixture
def deck(database, storage, auth, thumbnailer, deck_rules, test_settings):
    """A pitch-deck session wired to fakes with a fixed clock."""
    return PitchDeckSession(
        database,
        storage,
        auth,
        thumbnailer,
        rules=deck_rules,
        settings=test_settings,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def fake_container(database, storage, auth, renderer, frame_extractor):
    """Service container with every collaborator replaced by a fake."""
    container = ServiceContainer()
    container.register_instance(DatabaseInterface, database)
    container.register_instance(ObjectStorageInterface, storage)
    container.register_instance(AuthInterface, auth)
    container.register_instance(DocumentRendererInterface, renderer)
    container.register_instance(VideoFrameExtractorInterface, frame_extractor)
    return container


@pytest.fixture
def enable_logging():
    """Enable detailed logging for specific tests."""
    logger = logging.getLogger('founderhub')
    original = logger.level
    logger.setLevel(logging.DEBUG)
    yield
    logger.setLevel(original)


@pytest.fixture(autouse=True)
def reset_mocks():
    """Reset all mocks after each test."""
    yield
    patch.stopall()


# Markers for different test categories
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "e2e: mark test as an end-to-end test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "external: mark test as requiring external services")


# Custom test collection
def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "e2e" in str(item.fspath):
            item.add_marker(pytest.mark.e2e)

        if "supabase" in item.name.lower():
            item.add_marker(pytest.mark.external)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    import os
    os.environ["TESTING"] = "1"
    os.environ["LOG_LEVEL"] = "WARNING"

    yield

    if "TESTING" in os.environ:
        del os.environ["TESTING"]
