"""CLI command for generating and opening pull requests."""

from typing import Optional

import typer

from committer.branch import is_protected_branch
from committer.diff import EmptyDiff
from committer.git import (
    GitError,
    detect_base_branch,
    get_branch_diff,
    get_commits_since,
    get_current_branch,
    get_repo_root,
    get_uncommitted_changes,
    has_upstream,
    push_branch,
    stage_all_changes,
)
from committer.github import GitHubError, create_pull_request
from committer.llm import LLMError
from committer.pipeline import generate_pr_description
from committer.cli.main import commit_staged_changes, report_incomplete, report_llm_error
from committer.cli.prompts import (
    PrAction,
    UncommittedAction,
    prompt_pr,
    prompt_uncommitted_changes,
)
from committer.cli.utils import (
    effective_model,
    effective_verbose,
    load_config_or_exit,
    make_client,
    require_api_key,
    setup_logging,
    stream_to_stdout,
)


def pr_command(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Create the pull request without asking for confirmation",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-d",
        help="Only print the generated title and description",
    ),
    draft: bool = typer.Option(
        False,
        "--draft",
        "-D",
        help="Open the pull request as a draft",
    ),
    base: Optional[str] = typer.Option(
        None,
        "--base",
        "-b",
        help="Target branch (detected from origin/HEAD, main, master or develop)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Report excluded and truncated files",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="OpenRouter model to use (overrides config)",
    ),
) -> None:
    """Generate a pull request description for the current branch and open it with gh."""
    config = load_config_or_exit()
    setup_logging(effective_verbose(verbose, config))
    model = effective_model(model, config)

    api_key = require_api_key()

    try:
        repo_root = get_repo_root()
        current = get_current_branch()

        if current == "HEAD":
            typer.echo("✗ Detached HEAD: check out a branch first", err=True)
            raise typer.Exit(1)

        if is_protected_branch(current):
            typer.echo(f"✗ Cannot open a pull request from protected branch '{current}'", err=True)
            typer.echo("  → Create a feature branch first (committer -b)", err=True)
            raise typer.Exit(1)

        changes = get_uncommitted_changes()
        if not changes.is_empty and not yes:
            action = prompt_uncommitted_changes(changes)
            if action is UncommittedAction.QUIT:
                typer.echo("Cancelled.")
                raise typer.Exit(0)
            if action is UncommittedAction.COMMIT:
                if changes.unstaged:
                    stage_all_changes()
                commit_staged_changes(api_key, config, model, repo_root)

        base = base or detect_base_branch()
        commits = get_commits_since(base)
        if not commits:
            typer.echo(f"✓ No commits on '{current}' that are not on '{base}'")
            raise typer.Exit(0)

        diff = get_branch_diff(base)
        if isinstance(diff, EmptyDiff):
            typer.echo(f"✓ {diff.reason}")
            raise typer.Exit(0)

        typer.echo(f"Generating pull request for '{current}' → '{base}'...", err=True)
        with make_client(api_key, config) as client:
            result = generate_pr_description(
                diff,
                commits,
                current,
                base,
                config,
                client,
                model=model,
                sink=stream_to_stdout,
                repo_root=repo_root,
            )

        if isinstance(result, EmptyDiff):
            typer.echo(f"✓ {result.reason}")
            raise typer.Exit(0)

        typer.echo()
        if not result.completed:
            report_incomplete(result)

        if not result.message.title:
            typer.echo("✗ Empty pull request description generated", err=True)
            raise typer.Exit(1)

        if dry_run:
            return

        if yes:
            pr_action = PrAction(True, result.message.title, result.message.body)
        else:
            pr_action = prompt_pr(result.message.title, result.message.body)

        if not pr_action.create:
            typer.echo("Cancelled.")
            return

        if not has_upstream(current):
            typer.echo(f"→ Pushing '{current}' to origin", err=True)
            push_branch(current)

        url = create_pull_request(pr_action.title, pr_action.body, base, draft=draft)
        typer.echo(f"✓ Created pull request: {url}")

    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)
    except GitHubError as e:
        typer.echo(f"GitHub error: {e}", err=True)
        raise typer.Exit(1)
    except LLMError as e:
        report_llm_error(e)
