"""
Pytest fixtures for Folio integration tests.

Every test runs in its own working directory so that no settings.yaml or
.env from the repository leaks into the CLI's configuration.
"""

from pathlib import Path
from typing import Generator

import pytest
import yaml
from typer.testing import CliRunner

from tests.fixtures import get_post_unclosed_fence, get_valid_post, write_post


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Empty working directory with FOLIO_ variables cleared."""
    for name in ("FOLIO_CONFIG_FILE", "FOLIO_LOG_LEVEL", "FOLIO_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def posts_dir(workdir: Path) -> Path:
    """Default posts directory holding one valid post."""
    directory = workdir / "content" / "_posts"
    write_post(directory, "2017-06-28-stop-logging-everything.md", get_valid_post())
    return directory


@pytest.fixture
def broken_post(posts_dir: Path) -> Path:
    """A post with an unclosed code fence, next to the valid one."""
    return write_post(posts_dir, "2017-06-28-broken.md", get_post_unclosed_fence())


@pytest.fixture
def config_file(workdir: Path) -> Path:
    """Settings file that allows only the 'post' layout and sets a site URL."""
    path = workdir / "folio.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "lint": {"allowed_layouts": ["post"]},
                "site_url": "https://blog.example.com",
            }
        ),
        encoding="utf-8",
    )
    return path
