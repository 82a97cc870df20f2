"""Shared test fixtures and helpers for membank tests."""

import tempfile
from pathlib import Path

import pytest
from git import Repo

from membank.config import Settings
from membank.manager import BankManager
from membank.models import Identity, ProjectContext


# --- Fixtures ---


@pytest.fixture
def temp_dir():
    """Provide a temporary directory.

    Resolved so paths compare equal to what git reports on systems where
    the temp dir is behind a symlink.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def settings(temp_dir):
    """Settings with every location inside the temp dir.

    Temp-dir domain detection is disabled so the domain layout under
    ``code/`` is what decides the domain.
    """
    return Settings(
        central_root=temp_dir / "central",
        domains_root=temp_dir / "code" / "domains",
        legacy_root=temp_dir / "code",
        hooks_dir=temp_dir / "hooks",
        global_gitignore=temp_dir / "gitignore_global",
        temp_roots=[],
        register_excludesfile=False,
        log_file=temp_dir / "membank.log",
    )


@pytest.fixture
def project_root(settings):
    """A plain (non-git) project directory in the ``acme`` domain."""
    root = settings.domains_root / "acme" / "widget"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def oracle():
    return FakeOracle()


@pytest.fixture
def manager(settings, project_root, oracle):
    """BankManager for acme/widget on branch main, with a scripted oracle."""
    return make_manager(settings, project_root, "main", oracle)


@pytest.fixture
def git_project(settings):
    """A real git repository at acme/widget with one commit on main."""
    root = settings.domains_root / "acme" / "widget"
    root.mkdir(parents=True)
    repo = Repo.init(root)
    (root / "README.md").write_text("# Widget\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")
    yield repo
    repo.close()


# --- Helper Functions (not fixtures) ---


class FakeOracle:
    """Scripted stand-in for GitOracle.

    Args:
        history: Reflog subjects, newest first
        names: ref -> branch name answers for ref_name()
    """

    def __init__(self, history=None, names=None, branch="main", ignored=None):
        self.history = list(history or [])
        self.names = dict(names or {})
        self.branch = branch
        self.ignored = ignored

    def reflog(self, n):
        return self.history[:n]

    def ref_name(self, ref):
        return self.names.get(ref)

    def current_branch(self):
        return self.branch

    def toplevel(self):
        return None

    def is_ignored(self, path):
        return self.ignored


def make_identity(branch: str, domain: str = "acme", project: str = "widget") -> Identity:
    return Identity(domain=domain, project=project, branch=branch)


def make_manager(settings, root, branch, oracle=None) -> BankManager:
    """Manager as resolved right after ``branch`` was checked out."""
    context = ProjectContext(root=root, identity=make_identity(branch))
    return BankManager(settings, context, oracle or FakeOracle(branch=branch))


def add_note(bank: Path, text: str, name: str = "activeContext") -> None:
    """Append a bullet line to a bank document."""
    with (bank / f"{name}.md").open("a") as f:
        f.write(f"* {text}\n")
