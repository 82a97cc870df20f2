"""Tests for the read-only git oracle against real repositories."""

from pathlib import Path

from git import Repo

from membank.vcs import GitOracle


def test_toplevel_from_subdirectory(git_project):
    root = Path(git_project.working_tree_dir)
    nested = root / "src" / "pkg"
    nested.mkdir(parents=True)

    assert GitOracle(nested).toplevel() == root


def test_current_branch(git_project):
    assert GitOracle(git_project.working_tree_dir).current_branch() == "main"


def test_current_branch_detached(git_project):
    """Detached HEAD has no branch."""
    git_project.git.checkout(git_project.head.commit.hexsha)
    assert GitOracle(git_project.working_tree_dir).current_branch() is None


def test_current_branch_unborn(temp_dir):
    """A repository without commits has no branch yet."""
    repo = Repo.init(temp_dir / "fresh")
    try:
        assert GitOracle(temp_dir / "fresh").current_branch() is None
    finally:
        repo.close()


def test_outside_git(temp_dir):
    oracle = GitOracle(temp_dir)
    assert oracle.repo is None
    assert oracle.toplevel() is None
    assert oracle.current_branch() is None
    assert oracle.reflog(10) == []
    assert oracle.ref_name("HEAD") is None
    assert oracle.is_ignored(temp_dir / "memory-bank") is None


def test_reflog_newest_first(git_project):
    git_project.git.checkout("-b", "feature")
    git_project.git.checkout("main")

    history = GitOracle(git_project.working_tree_dir).reflog(10)

    assert history[0] == "checkout: moving from feature to main"
    assert history[1] == "checkout: moving from main to feature"


def test_reflog_window(git_project):
    for i in range(3):
        git_project.git.checkout("-b", f"topic-{i}")

    assert len(GitOracle(git_project.working_tree_dir).reflog(2)) == 2


def test_ref_name(git_project):
    oracle = GitOracle(git_project.working_tree_dir)
    assert oracle.ref_name(git_project.head.commit.hexsha) == "main"


def test_ref_name_unknown(git_project):
    assert GitOracle(git_project.working_tree_dir).ref_name("0" * 40) is None


def test_is_ignored(git_project):
    root = Path(git_project.working_tree_dir)
    (root / ".gitignore").write_text("/memory-bank\n")
    oracle = GitOracle(root)

    assert oracle.is_ignored(root / "memory-bank") is True
    assert oracle.is_ignored(root / "README.md") is False
