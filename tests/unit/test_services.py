"""
Unit tests for the service container and the backend implementations.

Covers container registration and resolution, the local JSON/directory
backend, the Supabase adapters against a mocked client, and the choosers.
"""
import pytest
from pathlib import Path
from unittest.mock import MagicMock, Mock, patch
from concurrent.futures import ThreadPoolExecutor

from founderhub.services import (
    AuthInterface,
    DatabaseInterface,
    DocumentRendererInterface,
    FileChooserInterface,
    LocalAuth,
    LocalDatabase,
    LocalObjectStorage,
    ObjectStorageInterface,
    Pdf2ImageRenderer,
    PresetFileChooser,
    PromptFileChooser,
    ServiceContainer,
    SupabaseAuth,
    SupabaseDatabase,
    SupabaseObjectStorage,
    VideoFrameExtractorInterface,
    register_default_services,
)
from founderhub.services.implementations import create_supabase_client
from founderhub.utils.config import Settings
from founderhub.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DatabaseError,
    SelectionError,
    StorageError,
)


class Counter:
    instances = 0

    def __init__(self):
        Counter.instances += 1


@pytest.fixture
def container():
    """Create a fresh ServiceContainer for each test."""
    return ServiceContainer()


class TestServiceContainer:

    def test_singleton_resolved_once(self, container):
        Counter.instances = 0
        container.register(DatabaseInterface, Counter)

        first = container.resolve(DatabaseInterface)
        second = container.resolve(DatabaseInterface)

        assert first is second
        assert Counter.instances == 1

    def test_transient_resolved_each_time(self, container):
        container.register(DatabaseInterface, Counter, singleton=False)
        assert container.resolve(DatabaseInterface) is not container.resolve(DatabaseInterface)

    def test_instance_registration(self, container):
        storage = Mock(spec=ObjectStorageInterface)
        container.register_instance(ObjectStorageInterface, storage)
        assert container.get_storage() is storage

    def test_factory_singleton(self, container):
        calls = []
        container.register_factory(AuthInterface, lambda: calls.append(1) or LocalAuth("u"),
                                   singleton=True)
        container.get_auth()
        container.get_auth()
        assert calls == [1]

    def test_unregistered_raises(self, container):
        with pytest.raises(KeyError, match="FileChooserInterface"):
            container.get_file_chooser()

    def test_is_registered_and_reset(self, container):
        container.register_instance(AuthInterface, LocalAuth("u"))
        assert container.is_registered(AuthInterface)
        container.reset()
        assert not container.is_registered(AuthInterface)

    def test_containers_are_independent(self):
        a, b = ServiceContainer(), ServiceContainer()
        a.register_instance(AuthInterface, LocalAuth("a"))
        assert not b.is_registered(AuthInterface)

    def test_concurrent_singleton_resolution(self, container):
        Counter.instances = 0
        container.register(DatabaseInterface, Counter)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: container.resolve(DatabaseInterface), range(32)))

        assert len({id(r) for r in results}) == 1
        assert Counter.instances == 1


class TestRegisterDefaultServices:

    def test_local_backend(self, container, test_settings):
        register_default_services(container, test_settings)

        assert isinstance(container.get_database(), LocalDatabase)
        assert isinstance(container.get_storage(), LocalObjectStorage)
        assert container.get_auth().current_user_id() == "local-founder"
        assert isinstance(container.get_document_renderer(), Pdf2ImageRenderer)
        assert container.is_registered(VideoFrameExtractorInterface)
        assert isinstance(container.get_file_chooser(), PromptFileChooser)

    def test_frame_extractor_uses_configured_binary(self, container, temp_dir):
        settings = Settings(storage_mode="local", ffmpeg_bin="/usr/local/bin/ffmpeg",
                            local_storage_dir=temp_dir / "storage",
                            local_tables_dir=temp_dir / "tables")
        register_default_services(container, settings)
        commands = []

        with patch("founderhub.media.ffmpeg_ops._run_cmd", side_effect=commands.append):
            container.get_frame_extractor().extract_frame(
                temp_dir / "demo.mp4", temp_dir / "out.jpg", 200, 75
            )

        assert commands[0][0] == "/usr/local/bin/ffmpeg"

    def test_supabase_backend(self, container):
        settings = Settings(storage_mode="supabase", supabase_url="https://x.supabase.co",
                            supabase_key="sb_secret_abcdefghijklmnop")
        client = MagicMock()
        with patch("founderhub.services.implementations.create_supabase_client",
                   return_value=client):
            register_default_services(container, settings)

        assert isinstance(container.get_database(), SupabaseDatabase)
        assert isinstance(container.get_storage(), SupabaseObjectStorage)
        assert isinstance(container.get_auth(), SupabaseAuth)

    def test_supabase_client_requires_credentials(self):
        settings = Settings(storage_mode="supabase", supabase_url=None, supabase_key=None)
        with pytest.raises(ConfigurationError, match="SUPABASE_URL"):
            create_supabase_client(settings)


class TestLocalDatabase:

    @pytest.fixture
    def db(self, temp_dir):
        return LocalDatabase(temp_dir / "tables")

    def test_insert_assigns_id_and_persists(self, db, temp_dir):
        row = db.insert("team_members", {"user_id": "u1", "name": "Ada"})

        assert row["id"]
        assert row["created_at"]
        assert (temp_dir / "tables" / "team_members.json").exists()
        assert LocalDatabase(temp_dir / "tables").select_one("team_members", {"id": row["id"]})

    def test_select_on_missing_table(self, db):
        assert db.select_one("nothing", {"id": 1}) is None
        assert db.select_many("nothing", {}) == []

    def test_select_many_filtered_and_ordered(self, db):
        db.insert("team_members", {"user_id": "u1", "name": "B", "created_at": "2024-01-02"})
        db.insert("team_members", {"user_id": "u1", "name": "A", "created_at": "2024-01-01"})
        db.insert("team_members", {"user_id": "u2", "name": "C", "created_at": "2024-01-03"})

        rows = db.select_many("team_members", {"user_id": "u1"}, order_by="created_at")

        assert [r["name"] for r in rows] == ["A", "B"]

    def test_update_and_delete(self, db):
        row = db.insert("pitch_decks", {"user_id": "u1", "is_submitted": False})

        updated = db.update("pitch_decks", {"is_submitted": True}, {"id": row["id"]})
        assert updated[0]["is_submitted"] is True
        assert db.select_one("pitch_decks", {"user_id": "u1"})["is_submitted"] is True

        assert db.update("pitch_decks", {"x": 1}, {"id": "missing"}) == []
        assert db.delete("pitch_decks", {"id": row["id"]}) == 1
        assert db.delete("pitch_decks", {"id": row["id"]}) == 0

    def test_corrupt_table_raises_database_error(self, db, temp_dir):
        path = temp_dir / "tables" / "broken.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(DatabaseError, match="broken"):
            db.select_one("broken", {})


class TestLocalObjectStorage:

    def test_upload_copies_file(self, temp_dir, deck_files):
        store = LocalObjectStorage(temp_dir / "objects")

        url = store.upload("pitch-deck-files", "u1/temp_0_1.pdf", deck_files["pdf"], "application/pdf")

        target = temp_dir / "objects" / "pitch-deck-files" / "u1" / "temp_0_1.pdf"
        assert target.read_bytes() == deck_files["pdf"].read_bytes()
        assert url.startswith("file://")

    def test_remove(self, temp_dir, deck_files):
        store = LocalObjectStorage(temp_dir / "objects")
        store.upload("b", "k/one.pdf", deck_files["pdf"], "application/pdf")

        store.remove("b", ["k/one.pdf", "k/never-existed.pdf"])

        assert not (temp_dir / "objects" / "b" / "k" / "one.pdf").exists()

    def test_key_cannot_escape_root(self, temp_dir, deck_files):
        store = LocalObjectStorage(temp_dir / "objects")
        with pytest.raises(StorageError, match="escapes"):
            store.upload("b", "../../outside.pdf", deck_files["pdf"], "application/pdf")

    def test_missing_source_raises_storage_error(self, temp_dir):
        store = LocalObjectStorage(temp_dir / "objects")
        with pytest.raises(StorageError):
            store.upload("b", "k.pdf", temp_dir / "missing.pdf", "application/pdf")


class TestLocalAuth:

    def test_sign_in_and_out(self):
        auth = LocalAuth()
        assert auth.current_user_id() is None

        user_id = auth.sign_in("", "")
        assert user_id
        assert auth.current_user_id() == user_id

        auth.sign_out()
        assert auth.current_user_id() is None

    def test_configured_user_kept_across_sign_in(self):
        auth = LocalAuth("founder-7")
        auth.sign_out()
        assert auth.sign_in("", "") == "founder-7"


class TestSupabaseAdapters:

    def test_supabase_storage_upload(self, deck_files):
        client = MagicMock()
        bucket_api = client.storage.from_.return_value
        bucket_api.get_public_url.return_value = "https://x.supabase.co/public/k.pdf"

        url = SupabaseObjectStorage(client).upload(
            "pitch-deck-files", "u1/temp_0_1.pdf", deck_files["pdf"], "application/pdf"
        )

        assert url == "https://x.supabase.co/public/k.pdf"
        client.storage.from_.assert_called_with("pitch-deck-files")
        bucket_api.upload.assert_called_once_with(
            "u1/temp_0_1.pdf",
            deck_files["pdf"].read_bytes(),
            file_options={"content-type": "application/pdf"},
        )

    def test_supabase_storage_failure_wrapped(self, deck_files):
        client = MagicMock()
        client.storage.from_.return_value.upload.side_effect = Exception("Payload too large")

        with pytest.raises(StorageError, match="Payload too large"):
            SupabaseObjectStorage(client).upload("b", "k.pdf", deck_files["pdf"], "application/pdf")

    def test_supabase_storage_remove_skips_empty(self):
        client = MagicMock()
        SupabaseObjectStorage(client).remove("b", [])
        client.storage.from_.assert_not_called()

    def test_supabase_select_one(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value
        query.eq.return_value.limit.return_value.execute.return_value.data = [{"id": 1}]

        row = SupabaseDatabase(client).select_one("pitch_decks", {"user_id": "u1"})

        assert row == {"id": 1}
        client.table.assert_called_with("pitch_decks")
        query.eq.assert_called_with("user_id", "u1")

    def test_supabase_select_one_empty(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value
        query.eq.return_value.limit.return_value.execute.return_value.data = []

        assert SupabaseDatabase(client).select_one("pitch_decks", {"user_id": "u1"}) is None

    def test_supabase_insert_without_row(self):
        client = MagicMock()
        client.table.return_value.insert.return_value.execute.return_value.data = []

        with pytest.raises(DatabaseError, match="returned no row"):
            SupabaseDatabase(client).insert("team_members", {"name": "Ada"})

    def test_supabase_database_auth_error(self):
        client = MagicMock()
        client.table.side_effect = Exception("JWT expired")

        with pytest.raises(DatabaseError, match="authentication failed"):
            SupabaseDatabase(client).select_many("team_members", {})

    def test_supabase_auth(self):
        client = MagicMock()
        client.auth.get_session.return_value = None
        auth = SupabaseAuth(client)
        assert auth.current_user_id() is None

        client.auth.sign_in_with_password.return_value.user.id = "user-42"
        assert auth.sign_in("a@b.co", "pw") == "user-42"

    def test_supabase_sign_in_failure(self):
        client = MagicMock()
        client.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(AuthenticationError):
            SupabaseAuth(client).sign_in("a@b.co", "wrong")


class TestChoosers:

    def test_preset_chooser(self, deck_files):
        chooser = PresetFileChooser([deck_files["pdf"], deck_files["mp4"]])
        assert chooser.pick_files(True, ["pdf"]) == [deck_files["pdf"], deck_files["mp4"]]
        assert chooser.pick_files(False, ["pdf"]) == [deck_files["pdf"]]

    def test_preset_chooser_empty_is_cancel(self):
        assert PresetFileChooser().pick_files(True, ["pdf"]) is None

    def test_prompt_chooser_parses_paths(self):
        with patch("founderhub.services.implementations.Prompt.ask",
                   return_value=' deck.pdf , "demo.mp4" '):
            paths = PromptFileChooser().pick_files(True, ["pdf", "mp4"])
        assert paths == [Path("deck.pdf"), Path("demo.mp4")]

    def test_prompt_chooser_blank_is_cancel(self):
        with patch("founderhub.services.implementations.Prompt.ask", return_value="  "):
            assert PromptFileChooser().pick_files(True, ["pdf"]) is None

    def test_prompt_chooser_rejects_bad_input(self):
        with patch("founderhub.services.implementations.Prompt.ask", return_value="deck|x.pdf"):
            with pytest.raises(SelectionError):
                PromptFileChooser().pick_files(True, ["pdf"])

    def test_choosers_implement_interface(self):
        assert issubclass(PresetFileChooser, FileChooserInterface)
        assert issubclass(Pdf2ImageRenderer, DocumentRendererInterface)
