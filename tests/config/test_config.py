from __future__ import annotations

from pathlib import Path

import pytest

from formsync.config import (
    ConfigurationError,
    FormFieldsConfig,
    MissingConfigurationError,
    env_flag,
    get_database_uri,
    get_form_fields_config,
    require_env_vars,
)
from formsync.config.form_fields import TRANSLATED_FILE_FIELDS_ENV, TRANSLATED_MEDIA_FIELDS_ENV
from formsync.config.storage import StorageConfig


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("Yes", True), (" on ", True), ("0", False), ("false", False), ("OFF", False)],
)
def test_env_flag_parses_common_spellings(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("FORMSYNC_TEST_FLAG", raw)

    assert env_flag("FORMSYNC_TEST_FLAG", default=not expected) is expected


def test_env_flag_falls_back_when_unset_or_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FORMSYNC_TEST_FLAG", raising=False)
    assert env_flag("FORMSYNC_TEST_FLAG", default=True) is True

    monkeypatch.setenv("FORMSYNC_TEST_FLAG", "  ")
    assert env_flag("FORMSYNC_TEST_FLAG", default=False) is False


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORMSYNC_TEST_FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="FORMSYNC_TEST_FLAG"):
        env_flag("FORMSYNC_TEST_FLAG", default=False)


def test_form_fields_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(TRANSLATED_MEDIA_FIELDS_ENV, raising=False)
    monkeypatch.delenv(TRANSLATED_FILE_FIELDS_ENV, raising=False)

    assert get_form_fields_config() == FormFieldsConfig(
        translated_media_fields=False, translated_file_fields=True
    )


def test_form_fields_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(TRANSLATED_MEDIA_FIELDS_ENV, "true")
    monkeypatch.setenv(TRANSLATED_FILE_FIELDS_ENV, "false")

    config = get_form_fields_config()

    assert config.translated_media_fields is True
    assert config.translated_file_fields is False


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FORMSYNC_PRESENT", "value")
    monkeypatch.delenv("FORMSYNC_ABSENT", raising=False)
    monkeypatch.setenv("FORMSYNC_BLANK", " ")

    assert require_env_vars(["FORMSYNC_PRESENT"]) == {"FORMSYNC_PRESENT": "value"}
    with pytest.raises(MissingConfigurationError, match="FORMSYNC_ABSENT, FORMSYNC_BLANK"):
        require_env_vars(["FORMSYNC_PRESENT", "FORMSYNC_BLANK", "FORMSYNC_ABSENT"])


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://db/formsync")

    assert get_database_uri() == "postgresql+psycopg://db/formsync"


def test_database_uri_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)

    uri = get_database_uri(storage=StorageConfig(data_dir=tmp_path / "data"))

    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'formsync.db'}"
    assert (tmp_path / "data").is_dir()
