from pathlib import Path

import pytest
from git.repo import Repo

from tests.constants import REMOTE_OWNER, REMOTE_REPO, REVIEW_BRANCH
from tests.fakes import ScriptedExecutor


@pytest.fixture(autouse=True)
def git_identity(monkeypatch: pytest.MonkeyPatch) -> None:
    """Commits made by the tests and by the tools need an identity, whatever the machine's git config."""

    monkeypatch.setenv("GIT_AUTHOR_NAME", "Issue Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "issue-bot@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Issue Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "issue-bot@example.com")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")


@pytest.fixture
def workspace_base(tmp_path: Path) -> Path:
    base = tmp_path / "agent"
    base.mkdir()
    return base


@pytest.fixture
def remote_repository(tmp_path: Path) -> Path:
    """A bare repository at `<tmp>/remotes/acme/widgets.git` with a `main` branch and a review branch."""

    remote_path = tmp_path / "remotes" / REMOTE_OWNER / f"{REMOTE_REPO}.git"
    remote_path.mkdir(parents=True)
    _ = Repo.init(remote_path, bare=True, initial_branch="main")

    seed_path = tmp_path / "seed"
    seed = Repo.init(seed_path, initial_branch="main")
    _ = (seed_path / "README.md").write_text("# Widgets\n")
    _ = seed.git.add("README.md")
    _ = seed.git.commit("-m", "Initial commit")
    _ = seed.git.remote("add", "origin", str(remote_path))
    _ = seed.git.push("origin", "main")

    _ = seed.git.checkout("-b", REVIEW_BRANCH)
    _ = (seed_path / "widget.py").write_text("WIDGETS = []\n")
    _ = seed.git.add("widget.py")
    _ = seed.git.commit("-m", "Add widget module")
    _ = seed.git.push("origin", REVIEW_BRANCH)

    return remote_path


@pytest.fixture
def scripted_executor() -> ScriptedExecutor:
    return ScriptedExecutor()
