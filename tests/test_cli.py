"""Tests for the committer and committer pr commands."""

import json

import httpx
import pytest
from typer.testing import CliRunner

from committer.cli import app
from committer.config import CommitterConfig
from committer.diff import EmptyDiff, parse_unified_diff
from committer.git import DiffScope, NotARepositoryError, UncommittedChanges
from committer.github import GitHubError
from committer.llm import LLMError
from committer.llm.branch import BranchAnalysis


runner = CliRunner()

COMMIT_TEXT = "feat(auth): add token refresh\n\n- refresh tokens before expiry"


@pytest.fixture(autouse=True)
def cli_env(mocker):
    """Configured user with an API key; logging left untouched."""
    mocker.patch("committer.cli.main.setup_logging")
    mocker.patch("committer.cli.pr.setup_logging")
    mocker.patch("committer.cli.main.load_dotenv")
    mocker.patch("committer.global_config.load_config", return_value=CommitterConfig(model="test/model"))
    mocker.patch("committer.global_config.get_api_key", return_value="sk-or-test")


@pytest.fixture
def repo(mocker, temp_dir, sample_diff_text):
    """Mock the git calls made by the main command."""
    return {
        "root": mocker.patch("committer.cli.main.get_repo_root", return_value=temp_dir),
        "diff": mocker.patch("committer.cli.main.get_diff", return_value=parse_unified_diff(sample_diff_text)),
        "commit": mocker.patch("committer.cli.main.run_git_commit", return_value=""),
        "stage": mocker.patch("committer.cli.main.stage_all_changes"),
        "has_changes": mocker.patch("committer.cli.main.has_changes", return_value=False),
        "current_branch": mocker.patch("committer.cli.main.get_current_branch", return_value="feat/auth"),
        "recent": mocker.patch("committer.cli.main.get_recent_commits", return_value=[]),
        "create_branch": mocker.patch("committer.cli.main.create_and_switch_branch"),
    }


@pytest.fixture
def streaming(mocker, provider, sse):
    """Serve a streamed response to the main command."""

    def serve(text=COMMIT_TEXT, **kwargs):
        chunks = kwargs.pop("chunks", [sse.delta(text, "stop"), sse.done])
        p = provider(chunks, **kwargs)
        mocker.patch("committer.cli.main.make_client", return_value=p.client)
        return p

    return serve


class TestMainCommand:
    """Tests for the default commit command."""

    def test_dry_run_prints_message(self, repo, streaming):
        streaming()

        result = runner.invoke(app, ["--dry-run"])

        assert result.exit_code == 0
        assert "feat(auth): add token refresh" in result.output
        repo["commit"].assert_not_called()

    def test_yes_commits(self, repo, streaming):
        streaming()

        result = runner.invoke(app, ["-y"])

        assert result.exit_code == 0
        repo["commit"].assert_called_once_with(COMMIT_TEXT)
        assert "Committed" in result.output

    def test_interactive_commit(self, repo, streaming):
        streaming()

        result = runner.invoke(app, [], input="y\n")

        assert result.exit_code == 0
        assert "[b] Create branch first" in result.output
        repo["commit"].assert_called_once_with(COMMIT_TEXT)

    def test_interactive_cancel(self, repo, streaming):
        streaming()

        result = runner.invoke(app, [], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        repo["commit"].assert_not_called()

    def test_invalid_choice_reprompts(self, repo, streaming):
        streaming()

        result = runner.invoke(app, [], input="x\nn\n")

        assert "Please enter y, n, e, or b" in result.output
        repo["commit"].assert_not_called()

    def test_edit_before_commit(self, repo, streaming, mocker):
        streaming()
        mocker.patch("typer.edit", return_value="fix: edited title\n")

        result = runner.invoke(app, [], input="e\ny\n")

        assert result.exit_code == 0
        repo["commit"].assert_called_once_with("fix: edited title")

    def test_model_flag_reaches_request(self, repo, streaming):
        p = streaming()

        runner.invoke(app, ["-d", "-m", "other/model"])

        assert json.loads(p.requests[0].content)["model"] == "other/model"

    def test_max_diff_bytes_flag(self, repo, streaming, file_diff):
        repo["diff"].return_value = parse_unified_diff(file_diff("src/big.py", 500))
        p = streaming()

        result = runner.invoke(app, ["-d", "--max-diff-bytes", "1000"])

        assert result.exit_code == 0
        assert "[truncated:" in json.loads(p.requests[0].content)["messages"][1]["content"]

    def test_no_api_key(self, repo, mocker):
        mocker.patch("committer.global_config.get_api_key", return_value=None)

        result = runner.invoke(app, ["-d"])

        assert result.exit_code == 1
        assert "No API key found" in result.output
        assert "config set-key" in result.output

    def test_nothing_staged_with_unstaged_changes(self, repo):
        repo["diff"].return_value = EmptyDiff("No staged changes found.")
        repo["has_changes"].return_value = True

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "No staged changes" in result.output

    def test_nothing_to_commit(self, repo):
        repo["diff"].return_value = EmptyDiff("No staged changes found.")

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "Nothing to commit" in result.output

    def test_only_excluded_files(self, repo, streaming, file_diff):
        repo["diff"].return_value = parse_unified_diff(file_diff("package-lock.json", 20))
        p = streaming()

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "Only excluded files changed" in result.output
        assert p.requests == []

    def test_all_stages_first(self, repo, streaming):
        streaming()

        runner.invoke(app, ["--all", "-y"])

        repo["stage"].assert_called_once()
        repo["diff"].assert_called_once_with(DiffScope.STAGED)

    def test_all_with_dry_run_does_not_stage(self, repo, streaming):
        streaming()

        runner.invoke(app, ["--all", "-d"])

        repo["stage"].assert_not_called()
        repo["diff"].assert_called_once_with(DiffScope.ALL)

    def test_interrupted_stream_is_not_committed(self, repo, streaming, sse):
        streaming(chunks=[sse.delta("feat(auth): add")], error=httpx.ReadError("reset by peer"))

        result = runner.invoke(app, ["-y"])

        assert result.exit_code == 1
        assert "feat(auth): add" in result.output
        assert "Connection lost while streaming" in result.output
        repo["commit"].assert_not_called()

    def test_cancelled(self, repo, streaming, mocker):
        streaming()
        mocker.patch("committer.cli.main.stream_to_stdout", side_effect=KeyboardInterrupt)

        result = runner.invoke(app, ["-y"])

        assert result.exit_code == 130
        repo["commit"].assert_not_called()

    def test_auth_error(self, repo, streaming):
        streaming(status_code=401, body=b'{"error": {"message": "User not found."}}')

        result = runner.invoke(app, ["-y"])

        assert result.exit_code == 1
        assert "Authentication failed (401): User not found." in result.output
        assert "OPENROUTER_API_KEY" in result.output

    def test_rate_limited(self, repo, streaming):
        streaming(status_code=429, headers={"Retry-After": "20"}, body=b"")

        result = runner.invoke(app, ["-y"])

        assert result.exit_code == 1
        assert "Try again in 20s" in result.output

    def test_not_a_repository(self, repo):
        repo["root"].side_effect = NotARepositoryError("Not in a git repository.")

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "Git error" in result.output

    def test_non_conformant_title_warned(self, repo, streaming):
        streaming("updated readme")

        result = runner.invoke(app, ["-y"])

        assert result.exit_code == 0
        assert "Title does not follow" in result.output
        repo["commit"].assert_called_once_with("updated readme")


class TestBranchAlignment:
    """Tests for --branch and --auto-branch."""

    def test_auto_branch_on_mismatch(self, repo, streaming, mocker):
        streaming()
        mocker.patch(
            "committer.cli.main.analyze_branch_alignment",
            return_value=BranchAnalysis(matches=False, reason="Unrelated", suggested_branch="feat/token-refresh"),
        )

        result = runner.invoke(app, ["-B", "-y"])

        assert result.exit_code == 0
        repo["create_branch"].assert_called_once_with("feat/token-refresh")
        repo["commit"].assert_called_once()

    def test_protected_branch_overrides_match(self, repo, streaming, mocker):
        streaming()
        repo["current_branch"].return_value = "main"
        mocker.patch("committer.cli.main.analyze_branch_alignment", return_value=BranchAnalysis(matches=True))

        runner.invoke(app, ["-B", "-y"])

        repo["create_branch"].assert_called_once_with("feat/auth-token-refresh")

    def test_matching_branch(self, repo, streaming, mocker):
        streaming()
        mocker.patch("committer.cli.main.analyze_branch_alignment", return_value=BranchAnalysis(matches=True))

        runner.invoke(app, ["-b", "-y"])

        repo["create_branch"].assert_not_called()

    def test_interactive_mismatch(self, repo, streaming, mocker):
        streaming()
        mocker.patch(
            "committer.cli.main.analyze_branch_alignment",
            return_value=BranchAnalysis(matches=False, reason="Unrelated", suggested_branch="feat/token-refresh"),
        )

        # Create the branch, then commit; [b] is no longer offered
        result = runner.invoke(app, ["-b"], input="y\ny\n")

        assert "Branch mismatch detected" in result.output
        assert "[b] Create branch first" not in result.output
        repo["create_branch"].assert_called_once_with("feat/token-refresh")
        repo["commit"].assert_called_once()

    def test_dry_run_does_not_create_branch(self, repo, streaming, mocker):
        streaming()
        mocker.patch(
            "committer.cli.main.analyze_branch_alignment",
            return_value=BranchAnalysis(matches=False, reason="Unrelated", suggested_branch="feat/token-refresh"),
        )

        result = runner.invoke(app, ["-B", "-d"])

        assert result.exit_code == 0
        assert "feat/token-refresh" in result.output
        repo["create_branch"].assert_not_called()

    def test_analysis_failure_is_not_fatal(self, repo, streaming, mocker):
        streaming()
        mocker.patch("committer.cli.main.analyze_branch_alignment", side_effect=LLMError("timeout"))

        result = runner.invoke(app, ["-b", "-y"])

        assert result.exit_code == 0
        repo["commit"].assert_called_once()

    def test_branch_option_from_commit_prompt(self, repo, streaming, mocker):
        streaming()
        mocker.patch("committer.cli.main.generate_branch_suggestion", return_value="feat/token-refresh")

        # [b], create the branch, then commit
        result = runner.invoke(app, [], input="b\ny\ny\n")

        assert "Suggested branch: feat/token-refresh" in result.output
        repo["create_branch"].assert_called_once_with("feat/token-refresh")
        repo["commit"].assert_called_once_with(COMMIT_TEXT)


@pytest.fixture
def branch_repo(mocker, temp_dir, sample_diff_text):
    """Mock the git and gh calls made by the pr command."""
    return {
        "root": mocker.patch("committer.cli.pr.get_repo_root", return_value=temp_dir),
        "current_branch": mocker.patch("committer.cli.pr.get_current_branch", return_value="feat/helper"),
        "changes": mocker.patch("committer.cli.pr.get_uncommitted_changes", return_value=UncommittedChanges()),
        "base": mocker.patch("committer.cli.pr.detect_base_branch", return_value="main"),
        "commits": mocker.patch("committer.cli.pr.get_commits_since", return_value=["feat: add helper"]),
        "diff": mocker.patch("committer.cli.pr.get_branch_diff", return_value=parse_unified_diff(sample_diff_text)),
        "upstream": mocker.patch("committer.cli.pr.has_upstream", return_value=False),
        "push": mocker.patch("committer.cli.pr.push_branch"),
        "create_pr": mocker.patch(
            "committer.cli.pr.create_pull_request",
            return_value="https://github.com/acme/app/pull/7",
        ),
        "commit_staged": mocker.patch("committer.cli.pr.commit_staged_changes", return_value=True),
        "stage": mocker.patch("committer.cli.pr.stage_all_changes"),
    }


PR_TEXT = "feat: add helper\n\n## Summary\nAdds a helper."


@pytest.fixture
def pr_streaming(mocker, provider, sse):
    def serve(text=PR_TEXT, **kwargs):
        p = provider([sse.delta(text, "stop"), sse.done], **kwargs)
        mocker.patch("committer.cli.pr.make_client", return_value=p.client)
        return p

    return serve


class TestPrCommand:
    """Tests for committer pr."""

    def test_yes_creates_pull_request(self, branch_repo, pr_streaming):
        pr_streaming()

        result = runner.invoke(app, ["pr", "-y"])

        assert result.exit_code == 0
        branch_repo["push"].assert_called_once_with("feat/helper")
        branch_repo["create_pr"].assert_called_once_with(
            "feat: add helper", "## Summary\nAdds a helper.", "main", draft=False
        )
        assert "Created pull request: https://github.com/acme/app/pull/7" in result.output

    def test_draft_and_explicit_base(self, branch_repo, pr_streaming):
        branch_repo["upstream"].return_value = True
        pr_streaming()

        runner.invoke(app, ["pr", "-y", "--draft", "--base", "develop"])

        branch_repo["base"].assert_not_called()
        branch_repo["push"].assert_not_called()
        branch_repo["create_pr"].assert_called_once_with(
            "feat: add helper", "## Summary\nAdds a helper.", "develop", draft=True
        )

    def test_dry_run(self, branch_repo, pr_streaming):
        pr_streaming()

        result = runner.invoke(app, ["pr", "-d"])

        assert result.exit_code == 0
        assert "## Summary" in result.output
        branch_repo["create_pr"].assert_not_called()

    def test_interactive_cancel(self, branch_repo, pr_streaming):
        pr_streaming()

        result = runner.invoke(app, ["pr"], input="n\n")

        assert "Cancelled" in result.output
        branch_repo["create_pr"].assert_not_called()

    def test_protected_branch(self, branch_repo, pr_streaming):
        branch_repo["current_branch"].return_value = "main"
        p = pr_streaming()

        result = runner.invoke(app, ["pr", "-y"])

        assert result.exit_code == 1
        assert "protected branch" in result.output
        assert p.requests == []

    def test_detached_head(self, branch_repo):
        branch_repo["current_branch"].return_value = "HEAD"

        result = runner.invoke(app, ["pr", "-y"])

        assert result.exit_code == 1
        assert "Detached HEAD" in result.output

    def test_no_commits(self, branch_repo, pr_streaming):
        branch_repo["commits"].return_value = []
        p = pr_streaming()

        result = runner.invoke(app, ["pr", "-y"])

        assert result.exit_code == 0
        assert "No commits on 'feat/helper'" in result.output
        assert p.requests == []

    def test_uncommitted_quit(self, branch_repo, pr_streaming):
        branch_repo["changes"].return_value = UncommittedChanges(unstaged=["notes.md"])
        pr_streaming()

        result = runner.invoke(app, ["pr"], input="q\n")

        assert result.exit_code == 0
        assert "notes.md" in result.output
        branch_repo["create_pr"].assert_not_called()

    def test_uncommitted_commit_first(self, branch_repo, pr_streaming):
        branch_repo["changes"].return_value = UncommittedChanges(staged=["a.py"], unstaged=["b.py"])
        pr_streaming()

        result = runner.invoke(app, ["pr"], input="c\ny\n")

        assert result.exit_code == 0
        branch_repo["stage"].assert_called_once()
        branch_repo["commit_staged"].assert_called_once()
        branch_repo["create_pr"].assert_called_once()

    def test_uncommitted_skip(self, branch_repo, pr_streaming):
        branch_repo["changes"].return_value = UncommittedChanges(staged=["a.py"])
        pr_streaming()

        runner.invoke(app, ["pr"], input="s\ny\n")

        branch_repo["commit_staged"].assert_not_called()
        branch_repo["create_pr"].assert_called_once()

    def test_gh_failure(self, branch_repo, pr_streaming):
        branch_repo["create_pr"].side_effect = GitHubError("gh not installed")
        pr_streaming()

        result = runner.invoke(app, ["pr", "-y"])

        assert result.exit_code == 1
        assert "GitHub error: gh not installed" in result.output


class TestEnvironmentFile:
    """Tests for loading .env at the CLI entry point."""

    def test_loaded_before_default_command(self, mocker, repo, streaming):
        mock_load = mocker.patch("committer.cli.main.load_dotenv")
        streaming()

        result = runner.invoke(app, ["--dry-run"])

        assert result.exit_code == 0
        mock_load.assert_called_once_with()

    def test_llm_package_does_not_load_it(self):
        """Test importing the LLM package leaves the environment alone."""
        import committer.llm

        assert not hasattr(committer.llm, "load_dotenv")
