import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from lms_companion.config import CompanionSettings


def test_defaults() -> None:
    settings = CompanionSettings()

    assert settings.url_scheme == "app"
    assert settings.watch_assignment_limit == 20
    assert settings.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LMS_URL_SCHEME", " Campus:// ")
    monkeypatch.setenv("LMS_LOG_LEVEL", "debug")
    monkeypatch.setenv("LMS_CATALOG_PATHS", os.pathsep.join(["one", "two"]))

    settings = CompanionSettings()

    assert settings.url_scheme == "campus"
    assert settings.log_level == "DEBUG"
    assert settings.catalog_paths == (Path("one"), Path("two"))


@pytest.mark.parametrize(
    ("name", "value"),
    [("LMS_LOG_LEVEL", "LOUD"), ("LMS_WATCH_ASSIGNMENT_LIMIT", "0"), ("LMS_URL_SCHEME", "://")],
)
def test_invalid_values_rejected(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        CompanionSettings()
