"""Pull request submission through the GitHub CLI.

Contains:
- GitHubError: Raised when gh is missing or fails
- create_pull_request: Open a pull request with `gh pr create`
"""

import subprocess


class GitHubError(Exception):
    """Raised when a GitHub CLI command fails."""

    pass


def create_pull_request(title: str, body: str, base: str, draft: bool = False) -> str:
    """Open a pull request for the current branch.

    Args:
        title: Pull request title.
        body: Pull request description (markdown).
        base: Target branch.
        draft: Open the pull request as a draft.

    Returns:
        The URL of the created pull request.

    Raises:
        GitHubError: If gh is not installed or the command fails.
    """
    args = ["gh", "pr", "create", "--title", title, "--body", body, "--base", base]
    if draft:
        args.append("--draft")

    try:
        result = subprocess.run(args, capture_output=True, text=True, check=True)
    except subprocess.CalledProcessError as e:
        error_msg = e.stderr.strip() if e.stderr else str(e)
        raise GitHubError(f"Failed to create pull request: {error_msg}")
    except FileNotFoundError:
        raise GitHubError(
            "GitHub CLI (gh) is not installed or not in PATH. "
            "Install it from https://cli.github.com/ and run 'gh auth login'."
        )

    lines = result.stdout.strip().split("\n")
    return lines[-1] if lines else ""
