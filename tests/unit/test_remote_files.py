import re
from unittest.mock import MagicMock, Mock

import pytest

from profileready.application.use_cases.remote_files import RemoteFilesUseCase
from profileready.config import Settings
from profileready.domain.errors import (
    AuthenticationError,
    ForbiddenError,
    InvalidParameterError,
    NoFileError,
    PayloadTooLargeError,
    RemoteStorageError,
    RemoteStorageUnavailableError,
)
from profileready.infrastructure.storage.supabase_storage import SignedObject, SupabaseStorage
from profileready.infrastructure.supabase_client import SupabaseAuthAdapter, UserInfo

USER = UserInfo(id="u1", email="u1@example.test")


@pytest.fixture()
def client():
    client = MagicMock()
    client.storage.from_.return_value.create_signed_url.return_value = {"signedURL": "https://example.test/s"}
    return client


@pytest.fixture()
def storage(client):
    return SupabaseStorage(client, "user-uploads")


# --- SupabaseStorage ----------------------------------------------------


def test_upload_and_sign(storage, client):
    signed = storage.upload_and_sign("users/u1/a.png", b"data", "image/png", 3600)
    bucket = client.storage.from_.return_value
    client.storage.from_.assert_called_with("user-uploads")
    bucket.upload.assert_called_once_with(
        path="users/u1/a.png", file=b"data", file_options={"content-type": "image/png", "upsert": "false"}
    )
    bucket.create_signed_url.assert_called_once_with("users/u1/a.png", 3600)
    assert signed == SignedObject("user-uploads", "users/u1/a.png", "https://example.test/s", 3600)


def test_publish_file_overwrites(storage, client, tmp_path):
    local = tmp_path / "1_ab-rendered.png"
    local.write_bytes(b"png")
    url = storage.publish_file(local, "renders/1_ab-rendered.png", 86400)
    assert url == "https://example.test/s"
    options = client.storage.from_.return_value.upload.call_args.kwargs["file_options"]
    assert options["upsert"] == "true"


def test_sdk_failures_become_remote_storage_errors(storage, client, tmp_path):
    client.storage.from_.return_value.upload.side_effect = RuntimeError("503")
    with pytest.raises(RemoteStorageError):
        storage.upload_bytes("x", b"d", "image/png")
    client.storage.from_.return_value.create_signed_url.return_value = {}
    with pytest.raises(RemoteStorageError):
        storage.create_signed_url("x", 10)
    with pytest.raises(RemoteStorageError):
        storage.publish_file(tmp_path / "missing.png", "renders/missing.png", 10)


# --- RemoteFilesUseCase -------------------------------------------------


def test_upload_for_user_sanitises_name():
    remote = Mock()
    remote.upload_and_sign.return_value = SignedObject("b", "p", "u", 3600)
    use_case = RemoteFilesUseCase(remote=remote)
    use_case.upload_for_user(USER, b"data", "my photo (1).png", "image/png")
    path, data, content_type, ttl = remote.upload_and_sign.call_args.args
    assert re.fullmatch(r"users/u1/\d+_my_photo__1_\.png", path)
    assert (data, content_type, ttl) == (b"data", "image/png", 3600)


def test_upload_for_user_validates_payload():
    use_case = RemoteFilesUseCase(remote=Mock(), max_bytes=3)
    with pytest.raises(NoFileError):
        use_case.upload_for_user(USER, b"", "a.png", None)
    with pytest.raises(PayloadTooLargeError):
        use_case.upload_for_user(USER, b"four", "a.png", None)


def test_remote_not_configured():
    use_case = RemoteFilesUseCase(remote=None)
    with pytest.raises(RemoteStorageUnavailableError):
        use_case.upload_for_user(USER, b"data", "a.png", None)
    with pytest.raises(RemoteStorageUnavailableError):
        use_case.sign_for_user(USER, "users/u1/a.png")


def test_sign_for_user():
    remote = Mock(bucket="user-uploads")
    remote.create_signed_url.return_value = "https://example.test/s"
    use_case = RemoteFilesUseCase(remote=remote)
    signed = use_case.sign_for_user(USER, "users/u1/a.png")
    assert signed.expires_in == 3600
    assert signed.signed_url == "https://example.test/s"
    assert use_case.sign_for_user(USER, "users/u1/a.png", 60).expires_in == 60


@pytest.mark.parametrize("path", ["users/u2/a.png", "users/u1", "users/u1/../u2/a.png", "a.png"])
def test_sign_for_user_rejects_foreign_paths(path):
    use_case = RemoteFilesUseCase(remote=Mock(bucket="b"))
    with pytest.raises(ForbiddenError):
        use_case.sign_for_user(USER, path)


def test_sign_for_user_requires_path_and_positive_ttl():
    use_case = RemoteFilesUseCase(remote=Mock(bucket="b"))
    with pytest.raises(InvalidParameterError):
        use_case.sign_for_user(USER, "")
    with pytest.raises(InvalidParameterError):
        use_case.sign_for_user(USER, "users/u1/a.png", -5)


# --- auth ---------------------------------------------------------------


def test_disabled_auth_returns_stable_fake_user(monkeypatch):
    monkeypatch.setenv("SUPABASE_DISABLED", "1")
    adapter = SupabaseAuthAdapter(None, Settings())
    first = adapter.validate_token("token-a")
    assert first == adapter.validate_token("token-a")
    assert first.id.startswith("fake-")
    assert first != adapter.validate_token("token-b")
    with pytest.raises(AuthenticationError):
        adapter.validate_token("")


def test_auth_uses_supabase_user(monkeypatch):
    monkeypatch.setenv("SUPABASE_DISABLED", "0")
    client = MagicMock()
    client.auth.get_user.return_value.user = Mock(id="u9", email="u9@example.test")
    adapter = SupabaseAuthAdapter(client, Settings())
    assert adapter.validate_token("jwt") == UserInfo(id="u9", email="u9@example.test")
    client.auth.get_user.side_effect = RuntimeError("expired")
    with pytest.raises(AuthenticationError):
        adapter.validate_token("jwt")


def test_settings_supabase_configured(monkeypatch):
    monkeypatch.setenv("SUPABASE_DISABLED", "0")
    monkeypatch.setenv("SUPABASE_URL", "https://x.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "key")
    monkeypatch.setenv("MAX_UPLOAD_MB", "2")
    settings = Settings()
    assert settings.supabase_configured
    assert settings.max_upload_bytes == 2 * 1024 * 1024
    monkeypatch.setenv("SUPABASE_DISABLED", "1")
    assert not Settings().supabase_configured
