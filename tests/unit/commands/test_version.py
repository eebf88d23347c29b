"""Tests for the version flow."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pychangesets.commands.base import CommandContext
from pychangesets.commands.version import VersionCommand
from pychangesets.config import GitHubContext, load_config
from pychangesets.errors import ConfigurationError, GitHubAPIError, VersionCommandError
from pychangesets.execution.runner import CommandResult
from pychangesets.workspace import Workspace


@pytest.fixture
def workspace(workspace_dir: Path, add_changeset) -> Workspace:
    add_changeset(workspace_dir, "brave-cats", {"pkg-a": "minor"}, "Add a shiny new option")
    return Workspace.discover(workspace_dir, load_config(workspace_dir))


@pytest.fixture
def scm() -> MagicMock:
    return MagicMock()


@pytest.fixture
def github() -> MagicMock:
    client = MagicMock()
    client.list_pull_requests.return_value = []
    client.create_pull_request.return_value = {"number": 12}
    return client


@pytest.fixture
def context(workspace: Workspace, scm: MagicMock, github: MagicMock) -> CommandContext:
    return CommandContext(
        workspace=workspace,
        scm=scm,
        github=github,
        github_context=GitHubContext(token="t", repository="owner/repo", ref_name="main", sha="base"),
    )


def bump_pkg_a(workspace_dir: Path, add_package, exit_code: int = 0):
    """Fake version command that bumps pkg-a to 1.1.0."""

    async def fake(command: str, cwd: Path, **kwargs) -> CommandResult:
        if exit_code == 0:
            add_package(workspace_dir / "packages" / "pkg-a", "pkg-a", "1.1.0")
        return CommandResult(command=command, exit_code=exit_code, output="boom" if exit_code else "")

    return AsyncMock(side_effect=fake)


class TestVersionCommand:
    """Tests for VersionCommand."""

    async def test_creates_pull_request(
        self, context, workspace_dir, add_package, scm, github
    ) -> None:
        fake = bump_pkg_a(workspace_dir, add_package)
        with patch("pychangesets.commands.version.run_command", fake):
            result = await VersionCommand(context).execute()

        assert result.created
        assert result.pull_request_number == 12
        assert result.branch == "changeset-release/main"
        assert [(c.name, c.old_version, c.new_version) for c in result.changed] == [
            ("pkg-a", "1.0.0", "1.1.0")
        ]

        scm.configure_identity.assert_called_once_with(None, None)
        scm.prepare_branch.assert_called_once_with("changeset-release/main")
        scm.commit_all_and_push.assert_called_once_with("changeset-release/main", "Version Packages")
        github.list_pull_requests.assert_called_once_with(head="changeset-release/main", base="main")

        kwargs = github.create_pull_request.call_args.kwargs
        assert kwargs["title"] == "Version Packages"
        assert kwargs["head"] == "changeset-release/main"
        assert kwargs["base"] == "main"
        assert "## pkg-a@1.1.0" in kwargs["body"]
        assert "- abc1234: Add a shiny new option" in kwargs["body"]
        github.update_pull_request.assert_not_called()

    async def test_branch_prepared_before_version_command(
        self, context, workspace_dir, add_package, scm
    ) -> None:
        fake = bump_pkg_a(workspace_dir, add_package)

        async def check_order(command: str, cwd: Path, **kwargs) -> CommandResult:
            assert scm.prepare_branch.called
            return await fake(command, cwd, **kwargs)

        with patch("pychangesets.commands.version.run_command", AsyncMock(side_effect=check_order)):
            await VersionCommand(context).execute()

    async def test_updates_existing_pull_request(
        self, context, workspace_dir, add_package, github
    ) -> None:
        github.list_pull_requests.return_value = [{"number": 5}]
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            result = await VersionCommand(context).execute()

        assert not result.created
        assert result.pull_request_number == 5
        github.create_pull_request.assert_not_called()
        github.update_pull_request.assert_called_once()
        assert github.update_pull_request.call_args.args == (5,)
        assert github.update_pull_request.call_args.kwargs["title"] == "Version Packages"

    async def test_applies_labels_to_new_pull_request(
        self, context, workspace, workspace_dir, add_package, github
    ) -> None:
        workspace.config = workspace.config.model_copy(update={"labels": ["release"]})
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            await VersionCommand(context).execute()

        github.add_labels.assert_called_once_with(12, ["release"])

    async def test_label_failure_is_not_fatal(
        self, context, workspace, workspace_dir, add_package, github
    ) -> None:
        workspace.config = workspace.config.model_copy(update={"labels": ["release"]})
        github.add_labels.side_effect = GitHubAPIError("Label does not exist", status=422)
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            result = await VersionCommand(context).execute()

        assert result.pull_request_number == 12

    async def test_pre_mode_suffix(
        self, context, workspace_dir, add_package, scm, github
    ) -> None:
        (workspace_dir / ".changeset" / "pre.json").write_text(
            json.dumps({"mode": "pre", "tag": "beta", "changesets": []})
        )
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            await VersionCommand(context).execute()

        scm.commit_all_and_push.assert_called_once_with(
            "changeset-release/main", "Version Packages (beta)"
        )
        kwargs = github.create_pull_request.call_args.kwargs
        assert kwargs["title"] == "Version Packages (beta)"
        assert "**pre mode** (`beta`)" in kwargs["body"]

    async def test_nothing_changed(self, context, scm, github) -> None:
        fake = AsyncMock(return_value=CommandResult(command="changeset version", exit_code=0))
        with patch("pychangesets.commands.version.run_command", fake):
            result = await VersionCommand(context).execute()

        assert result.no_op
        assert result.pull_request_number is None
        scm.commit_all_and_push.assert_not_called()
        github.list_pull_requests.assert_not_called()
        github.create_pull_request.assert_not_called()

    async def test_blank_version_command_runs_default(
        self, workspace_dir, add_changeset, add_package, scm, github
    ) -> None:
        add_changeset(workspace_dir, "brave-cats", {"pkg-a": "minor"}, "Add a shiny new option")
        (workspace_dir / "pychangesets.yaml").write_text(
            "packages:\n  - packages/*\nversion: ''\n"
        )
        workspace = Workspace.discover(
            workspace_dir, load_config(workspace_dir, {"version": "  "})
        )
        context = CommandContext(
            workspace=workspace,
            scm=scm,
            github=github,
            github_context=GitHubContext(token="t", repository="owner/repo", ref_name="main"),
        )
        fake = bump_pkg_a(workspace_dir, add_package)
        with patch("pychangesets.commands.version.run_command", fake):
            result = await VersionCommand(context).execute()

        assert fake.call_args.args[0] == "changeset version"
        assert result.pull_request_number == 12

    async def test_version_command_failure(self, context, workspace_dir, add_package, scm) -> None:
        fake = bump_pkg_a(workspace_dir, add_package, exit_code=2)
        with patch("pychangesets.commands.version.run_command", fake):
            with pytest.raises(VersionCommandError) as exc_info:
                await VersionCommand(context).execute()

        assert exc_info.value.exit_code == 2
        assert exc_info.value.output == "boom"
        scm.commit_all_and_push.assert_not_called()

    async def test_dry_run(self, context, workspace_dir, add_package, scm, github) -> None:
        context.dry_run = True
        context.github = None
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            result = await VersionCommand(context).execute()

        assert result.dry_run
        assert result.body is not None
        assert "## pkg-a@1.1.0" in result.body.text
        assert scm.method_calls == []

    async def test_requires_token(self, context, scm) -> None:
        context.github = None
        fake = AsyncMock()
        with patch("pychangesets.commands.version.run_command", fake):
            with pytest.raises(ConfigurationError, match="GITHUB_TOKEN"):
                await VersionCommand(context).execute()

        fake.assert_not_called()
        assert scm.method_calls == []

    async def test_skip_git_user_setup(
        self, context, workspace, workspace_dir, add_package, scm
    ) -> None:
        workspace.config = workspace.config.model_copy(update={"setup_git_user": False})
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            await VersionCommand(context).execute()

        scm.configure_identity.assert_not_called()

    async def test_custom_identity(self, context, workspace, workspace_dir, add_package, scm) -> None:
        workspace.config = workspace.config.model_copy(
            update={"git_user_name": "", "git_user_email": "release@example.com"}
        )
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            await VersionCommand(context).execute()

        scm.configure_identity.assert_called_once_with("", "release@example.com")

    async def test_base_branch_from_git(self, context, workspace_dir, add_package, github) -> None:
        context.github_context = GitHubContext(token="t", repository="owner/repo")
        with (
            patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)),
            patch("pychangesets.commands.version.get_current_branch", return_value="develop"),
        ):
            result = await VersionCommand(context).execute()

        assert result.branch == "changeset-release/develop"
        assert github.create_pull_request.call_args.kwargs["base"] == "develop"

    async def test_collapsed_changelog_links_to_version_branch(
        self, context, workspace, workspace_dir, add_package, github
    ) -> None:
        long_entry = "\n".join(f"- change number {i}" for i in range(200))
        (workspace_dir / "packages" / "pkg-a" / "CHANGELOG.md").write_text(
            f"# pkg-a\n\n## 1.1.0\n\n### Minor Changes\n\n{long_entry}\n"
        )
        workspace.config = workspace.config.model_copy(update={"pr_body_max_characters": 1000})
        with patch("pychangesets.commands.version.run_command", bump_pkg_a(workspace_dir, add_package)):
            result = await VersionCommand(context).execute()

        assert result.body is not None
        assert result.body.collapsed == ("pkg-a",)
        assert (
            "https://github.com/owner/repo/blob/changeset-release/main/packages/pkg-a/CHANGELOG.md"
            in github.create_pull_request.call_args.kwargs["body"]
        )
