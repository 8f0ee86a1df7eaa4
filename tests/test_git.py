"""Tests for committer.git package."""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from committer.diff import EmptyDiff, RawDiff
from committer.git import (
    DiffScope,
    GitError,
    NotARepositoryError,
    create_and_switch_branch,
    detect_base_branch,
    get_branch_diff,
    get_commits_since,
    get_current_branch,
    get_diff,
    get_recent_commits,
    get_repo_root,
    get_uncommitted_changes,
    has_changes,
    has_upstream,
    push_branch,
    run_git_commit,
    stage_all_changes,
)
from committer.git.runner import _run_git_command


def git_result(stdout=""):
    mock_result = MagicMock()
    mock_result.stdout = stdout
    mock_result.returncode = 0
    return mock_result


class TestRunGitCommand:
    """Tests for _run_git_command function."""

    def test_successful_command(self, mocker):
        """Test successful git command execution."""
        mocker.patch("subprocess.run", return_value=git_result("output\n"))
        assert _run_git_command(["status"]) == "output"

    def test_unstripped_output(self, mocker):
        """Test porcelain output keeps its leading columns."""
        mocker.patch("subprocess.run", return_value=git_result(" M file.py\n"))
        assert _run_git_command(["status"], strip=False) == " M file.py\n"

    def test_failed_command_raises_error(self, mocker):
        """Test that failed command raises GitError."""
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "git", stderr="error")
        )

        with pytest.raises(GitError) as exc_info:
            _run_git_command(["invalid"])

        assert "Git command failed: git invalid" in str(exc_info.value)

    def test_output_decoded_as_utf8_with_replacement(self, mocker):
        """Test git output is decoded leniently so non-UTF-8 content cannot raise."""
        mock_run = mocker.patch("subprocess.run", return_value=git_result("ok\n"))

        _run_git_command(["diff"])

        kwargs = mock_run.call_args[1]
        assert kwargs["encoding"] == "utf-8"
        assert kwargs["errors"] == "replace"

    def test_git_not_found_raises_error(self, mocker):
        """Test that missing git raises GitError."""
        mocker.patch("subprocess.run", side_effect=FileNotFoundError())

        with pytest.raises(GitError) as exc_info:
            _run_git_command(["status"])

        assert "not installed" in str(exc_info.value)


class TestGetRepoRoot:
    """Tests for get_repo_root function."""

    def test_returns_path(self, mocker):
        mocker.patch("subprocess.run", return_value=git_result("/path/to/repo\n"))
        assert get_repo_root() == Path("/path/to/repo")

    def test_raises_error_if_not_repo(self, mocker):
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(128, "git", stderr="not a git repo")
        )
        with pytest.raises(NotARepositoryError):
            get_repo_root()


class TestGetDiff:
    """Tests for get_diff and get_branch_diff functions."""

    @pytest.fixture(autouse=True)
    def in_repo(self, mocker):
        mocker.patch("committer.git.diff.get_repo_root", return_value=Path("/repo"))
        mocker.patch("committer.git.diff.has_head", return_value=True)

    def test_staged_diff(self, mocker, sample_diff_text):
        mock_run = mocker.patch("committer.git.diff._run_git_command", return_value=sample_diff_text)

        diff = get_diff()

        assert isinstance(diff, RawDiff)
        assert len(diff) == 4
        args = mock_run.call_args[0][0]
        assert args[:4] == ["-c", "core.quotepath=false", "diff", "--cached"]
        assert "--no-ext-diff" in args
        assert mock_run.call_args[1] == {"strip": False}

    def test_all_changes_diff_against_head(self, mocker, sample_diff_text):
        mock_run = mocker.patch("committer.git.diff._run_git_command", return_value=sample_diff_text)
        get_diff(DiffScope.ALL)
        assert mock_run.call_args[0][0][2:4] == ["diff", "HEAD"]

    def test_all_changes_without_commits(self, mocker, sample_diff_text):
        mocker.patch("committer.git.diff.has_head", return_value=False)
        mock_run = mocker.patch("committer.git.diff._run_git_command", return_value=sample_diff_text)
        get_diff(DiffScope.ALL)
        assert mock_run.call_args[0][0][2:4] == ["diff", "--cached"]

    def test_nothing_staged(self, mocker):
        mocker.patch("committer.git.diff._run_git_command", return_value="")
        assert get_diff() == EmptyDiff("No staged changes found.")

    def test_nothing_changed(self, mocker):
        mocker.patch("committer.git.diff._run_git_command", return_value="\n")
        assert get_diff(DiffScope.ALL) == EmptyDiff("No changes found.")

    def test_branch_diff(self, mocker, sample_diff_text):
        mock_run = mocker.patch("committer.git.diff._run_git_command", return_value=sample_diff_text)
        diff = get_branch_diff("main")
        assert len(diff) == 4
        assert "main...HEAD" in mock_run.call_args[0][0]

    def test_branch_diff_empty(self, mocker):
        mocker.patch("committer.git.diff._run_git_command", return_value="")
        assert isinstance(get_branch_diff("main"), EmptyDiff)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestGetDiffInRepository:
    """Tests for get_diff against a real temporary repository."""

    @pytest.fixture
    def repo(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        subprocess.run(["git", "init", "-q"], check=True)
        return temp_dir

    def test_latin1_staged_file(self, repo):
        (repo / "notes.txt").write_bytes(b"caf\xe9\n")
        subprocess.run(["git", "add", "notes.txt"], check=True)

        diff = get_diff(DiffScope.STAGED)

        assert isinstance(diff, RawDiff)
        assert diff.paths == ["notes.txt"]
        assert "+caf\ufffd" in diff.text

    def test_utf8_staged_file(self, repo):
        (repo / "greeting.txt").write_text("grüße\n", encoding="utf-8")
        subprocess.run(["git", "add", "greeting.txt"], check=True)

        diff = get_diff(DiffScope.STAGED)

        assert "+grüße" in diff.text


class TestStatus:
    """Tests for has_changes and get_uncommitted_changes."""

    def test_has_changes(self, mocker):
        mocker.patch("subprocess.run", return_value=git_result("?? new.py\n"))
        assert has_changes()

    def test_clean(self, mocker):
        mocker.patch("subprocess.run", return_value=git_result(""))
        assert not has_changes()

    def test_split_staged_and_unstaged(self, mocker):
        output = "M  staged.py\n M unstaged.py\nMM both.py\n?? new.py\nA  added.py\n"
        mocker.patch("subprocess.run", return_value=git_result(output))

        changes = get_uncommitted_changes()

        assert changes.staged == ["staged.py", "both.py", "added.py"]
        assert changes.unstaged == ["unstaged.py", "both.py", "new.py"]
        assert not changes.is_empty


class TestBranch:
    """Tests for committer.git.branch functions."""

    def test_current_branch(self, mocker):
        mocker.patch("subprocess.run", return_value=git_result("feat/login\n"))
        assert get_current_branch() == "feat/login"

    def test_detached_head(self, mocker):
        mocker.patch("subprocess.run", return_value=git_result(""))
        assert get_current_branch() == "HEAD"

    def test_recent_commits(self, mocker):
        mocker.patch("subprocess.run", return_value=git_result("feat: a\nfix: b\n"))
        assert get_recent_commits(2) == ["feat: a", "fix: b"]

    def test_recent_commits_in_empty_repo(self, mocker):
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(128, "git", stderr="no commits")
        )
        assert get_recent_commits() == []

    def test_create_branch(self, mocker):
        mock_run = mocker.patch("committer.git.branch._run_git_command", return_value="")
        create_and_switch_branch("feat/x")
        mock_run.assert_called_once_with(["checkout", "-b", "feat/x"])

    def test_base_from_origin_head(self, mocker):
        mocker.patch("committer.git.branch._run_git_command", return_value="refs/remotes/origin/trunk")
        assert detect_base_branch() == "trunk"

    def test_base_from_candidates(self, mocker):
        def fake_git(args):
            if args[0] == "symbolic-ref":
                raise GitError("no origin/HEAD")
            if args[-1] in ("master", "origin/main"):
                return "abc123"
            raise GitError("unknown ref")

        mocker.patch("committer.git.branch._run_git_command", side_effect=fake_git)
        # origin/main is checked before master
        assert detect_base_branch() == "main"

    def test_no_base_found(self, mocker):
        mocker.patch("committer.git.branch._run_git_command", side_effect=GitError("nope"))
        with pytest.raises(GitError) as exc_info:
            detect_base_branch()
        assert "--base" in str(exc_info.value)

    def test_commits_since(self, mocker):
        mock_run = mocker.patch("committer.git.branch._run_git_command", return_value="feat: a\nfix: b")
        assert get_commits_since("main") == ["feat: a", "fix: b"]
        assert mock_run.call_args[0][0][-1] == "main..HEAD"

    def test_no_commits_since(self, mocker):
        mocker.patch("committer.git.branch._run_git_command", return_value="")
        assert get_commits_since("main") == []

    def test_has_upstream(self, mocker):
        mock_run = mocker.patch("committer.git.branch._run_git_command", return_value="origin/feat/x")
        assert has_upstream("feat/x")
        assert mock_run.call_args[0][0][-1] == "feat/x@{upstream}"

    def test_no_upstream(self, mocker):
        mocker.patch("committer.git.branch._run_git_command", side_effect=GitError("no upstream"))
        assert not has_upstream()

    def test_push_branch(self, mocker):
        mock_run = mocker.patch("committer.git.branch._run_git_command", return_value="")
        push_branch("feat/x")
        mock_run.assert_called_once_with(["push", "--set-upstream", "origin", "feat/x"])


class TestCommit:
    """Tests for committer.git.commit functions."""

    def test_stage_all(self, mocker):
        mock_run = mocker.patch("committer.git.commit._run_git_command", return_value="")
        stage_all_changes()
        mock_run.assert_called_once_with(["add", "--all"])

    def test_commit(self, mocker):
        mock_run = mocker.patch("committer.git.commit._run_git_command", return_value="[main abc123] feat: x")
        run_git_commit("feat: x\n\n- detail\n")
        mock_run.assert_called_once_with(["commit", "--cleanup=strip", "-m", "feat: x\n\n- detail"])

    def test_empty_message_rejected(self, mocker):
        mock_run = mocker.patch("committer.git.commit._run_git_command")
        with pytest.raises(ValueError):
            run_git_commit("   \n")
        mock_run.assert_not_called()

    def test_hook_rejection(self, mocker):
        mocker.patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "git", stderr="pre-commit hook failed")
        )
        with pytest.raises(GitError) as exc_info:
            run_git_commit("feat: x")
        assert "pre-commit hook failed" in str(exc_info.value)
