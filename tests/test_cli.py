"""Tests for CLI commands."""

import pytest
import yaml
from click.testing import CliRunner

from membank import store
from membank.cli import cli

runner = CliRunner()


@pytest.fixture
def config_file(settings, temp_dir):
    """Settings file pointing every location into the temp dir."""
    path = temp_dir / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "central_root": str(settings.central_root),
                "domains_root": str(settings.domains_root),
                "legacy_root": str(settings.legacy_root),
                "hooks_dir": str(settings.hooks_dir),
                "global_gitignore": str(settings.global_gitignore),
                "temp_roots": [],
                "register_excludesfile": False,
                "log_file": str(settings.log_file),
            }
        )
    )
    return path


@pytest.fixture
def mb(config_file, project_root):
    """Invoke ``mb`` inside the acme/widget project."""

    def invoke(*args, **kwargs):
        return runner.invoke(cli, ["-C", str(project_root), "--config", str(config_file), *args], **kwargs)

    return invoke


def central(settings, branch="default"):
    return settings.central_root / "acme" / "widget" / branch


def test_status(mb):
    """Test status shows the resolved identity."""
    result = mb("status")
    assert result.exit_code == 0
    assert "Project: widget" in result.output
    assert "Domain: acme" in result.output
    assert "Branch: default" in result.output


def test_no_verb_shows_status(mb):
    result = mb()
    assert result.exit_code == 0
    assert "Memory Bank Status" in result.output


def test_help(mb):
    result = mb("help")
    assert result.exit_code == 0
    assert "fix-gitignore" in result.output


def test_unknown_verb(mb):
    """Test an unknown verb exits 1 with a hint."""
    result = mb("frobnicate")
    assert result.exit_code == 1
    assert "Unknown command: frobnicate" in result.output


def test_create(mb, settings, project_root):
    result = mb("create")
    assert result.exit_code == 0
    assert len(store.list_documents(central(settings))) == 5
    assert (project_root / "memory-bank" / "activeContext.md").exists()


def test_create_asks_before_overwriting(mb, settings):
    mb("create")
    with (central(settings) / "activeContext.md").open("a") as f:
        f.write("* keep me\n")

    result = mb("create", input="n\n")

    assert result.exit_code == 0
    assert "Cancelled" in result.output
    assert "keep me" in (central(settings) / "activeContext.md").read_text()


def test_create_yes_overwrites(mb, settings):
    mb("create")
    with (central(settings) / "activeContext.md").open("a") as f:
        f.write("* old\n")

    assert mb("create", "--yes").exit_code == 0
    assert "* old" not in (central(settings) / "activeContext.md").read_text()


def test_switch_copy(mb, settings):
    mb("create")
    result = mb("switch", "feature", "--copy")

    assert result.exit_code == 0
    assert "Switched to memory bank for widget (feature)" in result.output
    assert "Branch created from default" in (central(settings, "feature") / "activeContext.md").read_text()


def test_switch_prompts_for_missing_bank(mb, settings):
    mb("create")
    result = mb("switch", "feature", input="1\n")

    assert result.exit_code == 0
    assert "Create new memory bank" in result.output
    assert "Branch created from" not in (central(settings, "feature") / "activeContext.md").read_text()


def test_sync(mb, settings, project_root):
    mb("create")
    with (project_root / "memory-bank" / "progress.md").open("a") as f:
        f.write("* shipped\n")

    result = mb("sync")

    assert result.exit_code == 0
    assert "shipped" in (central(settings) / "progress.md").read_text()


def test_list(mb, settings):
    mb("create")
    store.initialize(central(settings, "feature"))

    result = mb("list")

    assert result.exit_code == 0
    assert "default" in result.output
    assert "feature" in result.output
    assert "current" in result.output


def test_list_empty(mb):
    result = mb("list")
    assert result.exit_code == 0
    assert "None found" in result.output


def test_archive(mb, settings):
    mb("create")
    result = mb("archive")

    assert result.exit_code == 0
    assert not central(settings).exists()
    assert "default-" in mb("list", "--archived").output


def test_archive_missing(mb):
    result = mb("archive", "ghost")
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_merge_requires_branch(mb):
    """Test merge without a source branch prints usage and exits 1."""
    result = mb("merge")
    assert result.exit_code == 1
    assert "Source branch required" in result.output
    assert "mb merge <source_branch>" in result.output


def test_rebase_requires_branch(mb):
    result = mb("rebase")
    assert result.exit_code == 1
    assert "Base branch required" in result.output


def test_merge_missing_source(mb):
    mb("create")
    result = mb("merge", "ghost")
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_merge(mb, settings):
    mb("create")
    store.initialize(central(settings, "feature"))

    result = mb("merge", "feature")

    assert result.exit_code == 0
    assert "## Merged from feature on" in (central(settings) / "activeContext.md").read_text()


def test_check_and_fix_gitignore(mb, settings, project_root):
    result = mb("check")
    assert result.exit_code == 0
    assert "may not be gitignored" in result.output

    result = mb("fix-gitignore")
    assert result.exit_code == 0
    assert "/memory-bank" in (project_root / ".gitignore").read_text()
    assert "memory-bank/" in settings.global_gitignore.read_text()

    result = mb("check")
    assert "properly gitignored" in result.output


def test_bad_config_exits_1(project_root, temp_dir):
    config = temp_dir / "broken.yaml"
    config.write_text("central_root: [unclosed\n")

    result = runner.invoke(cli, ["-C", str(project_root), "--config", str(config), "status"])

    assert result.exit_code == 1
    assert "Failed to parse" in result.output


# ─────────────────────────────────────────────────────────────────────────────
# Hooks
# ─────────────────────────────────────────────────────────────────────────────


def test_hook_post_checkout_creates_bank(mb, settings):
    sha = "a" * 40
    result = mb("hook", "post-checkout", sha, sha, "1")

    assert result.exit_code == 0
    assert store.has_content(central(settings))


def test_hook_file_checkout_is_noop(mb, settings):
    result = mb("hook", "post-checkout", "a" * 40, "b" * 40, "0")

    assert result.exit_code == 0
    assert not central(settings).exists()


def test_hooks_exit_zero_on_bad_config(project_root, temp_dir):
    """Test a broken setup never fails the git operation."""
    config = temp_dir / "broken.yaml"
    config.write_text("central_root: [unclosed\n")

    for name in ("pre-checkout", "post-checkout", "post-merge", "post-rebase"):
        result = runner.invoke(cli, ["-C", str(project_root), "--config", str(config), "hook", name])
        assert result.exit_code == 0, name


def test_hook_post_merge(mb, settings):
    mb("create")
    result = mb("hook", "post-merge")

    assert result.exit_code == 0
    assert "## Merge Event" in (central(settings) / "activeContext.md").read_text()


def test_unknown_hook(mb):
    result = mb("hook", "bogus")
    assert result.exit_code == 1
    assert "Unknown command: bogus" in result.output
