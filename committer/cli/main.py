"""Main CLI command: generate a commit message and commit it."""

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from loguru import logger

from committer.branch import generate_fallback_branch, is_protected_branch
from committer.config import CommitterConfig
from committer.diff import EmptyDiff
from committer.git import (
    DiffScope,
    GitError,
    create_and_switch_branch,
    get_current_branch,
    get_diff,
    get_recent_commits,
    get_repo_root,
    has_changes,
    run_git_commit,
    stage_all_changes,
)
from committer.llm import (
    AuthError,
    LLMError,
    MissingAPIKeyError,
    RateLimitedError,
)
from committer.llm.branch import (
    BranchAnalysis,
    analyze_branch_alignment,
    generate_branch_suggestion,
)
from committer.pipeline import GenerationResult, Outcome, generate_commit_message
from committer.cli.prompts import CommitChoice, prompt_branch_action, prompt_commit
from committer.cli.utils import (
    effective_model,
    effective_verbose,
    load_config_or_exit,
    make_client,
    require_api_key,
    setup_logging,
    show_credential_help,
    stream_to_stdout,
)


def exit_on_empty_diff(empty: EmptyDiff, staged_only: bool = True) -> None:
    """Exit cleanly when there is nothing to describe.

    Exits 1 with a hint when only unstaged changes exist, otherwise 0.
    """
    if staged_only and has_changes():
        typer.echo("⚠ No staged changes", err=True)
        typer.echo("  → Use 'git add' or --all", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Nothing to commit")
    raise typer.Exit(0)


def report_incomplete(result: GenerationResult) -> None:
    """Explain why a stream ended early and exit. Nothing is committed."""
    if result.outcome is Outcome.CANCELLED:
        typer.echo("Cancelled.", err=True)
        raise typer.Exit(130)

    typer.echo(f"✗ {result.error}", err=True)
    if result.message.text:
        typer.echo("  → The partial output above was not committed. Run again to retry.", err=True)
    raise typer.Exit(1)


def report_llm_error(e: LLMError) -> None:
    """Print an LLM error with the hint matching its kind and exit 1."""
    if isinstance(e, (MissingAPIKeyError, AuthError)):
        typer.echo(f"✗ {e}", err=True)
        show_credential_help()
    elif isinstance(e, RateLimitedError):
        typer.echo(f"✗ {e}", err=True)
        if e.retry_after:
            typer.echo(f"  → Try again in {e.retry_after:g}s", err=True)
    else:
        typer.echo(f"LLM error: {e}", err=True)
    raise typer.Exit(1)


def generate_message(
    api_key: str,
    config: CommitterConfig,
    model: str,
    scope: DiffScope,
    repo_root: Path,
) -> GenerationResult:
    """Collect, filter and stream a commit message to stdout.

    Exits through exit_on_empty_diff or report_incomplete when there is no
    usable message.
    """
    diff = get_diff(scope)
    if isinstance(diff, EmptyDiff):
        exit_on_empty_diff(diff, staged_only=scope is DiffScope.STAGED)

    with make_client(api_key, config) as client:
        result = generate_commit_message(
            diff,
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

    if result.message.is_empty:
        typer.echo("✗ Empty commit message generated", err=True)
        raise typer.Exit(1)

    if not result.message.conformant:
        typer.echo("⚠ Title does not follow type(scope): subject; edit it if needed", err=True)
    return result


def check_branch_alignment(
    api_key: str,
    model: str,
    message: str,
    files: str,
    auto: bool,
    dry_run: bool = False,
) -> bool:
    """Offer a new branch when the commit does not fit the current one.

    In a dry run the suggestion is only printed.

    Returns:
        True when the branch question was settled (created or declined).
    """
    current = get_current_branch()
    recent = get_recent_commits(5)

    typer.echo("Analyzing branch alignment...", err=True)
    try:
        analysis = analyze_branch_alignment(api_key, model, current, message, files, recent)
    except LLMError as e:
        logger.warning("Branch analysis failed: {}", e)
        return False

    if analysis.matches and is_protected_branch(current):
        analysis = BranchAnalysis(matches=False, reason=f"'{current}' is a protected branch")

    logger.info("Branch analysis: {}", analysis.reason)
    if analysis.matches:
        return False

    suggested = analysis.suggested_branch or generate_fallback_branch(message)

    if dry_run:
        typer.echo(f"⚠ Branch mismatch: '{current}' → '{suggested}' ({analysis.reason})")
        return True

    if auto:
        typer.echo(f"→ Branch '{current}' → '{suggested}' ({analysis.reason})")
        create_and_switch_branch(suggested)
        return True

    action = prompt_branch_action(current, suggested, analysis.reason, True)
    if action.create:
        create_and_switch_branch(action.name)
        typer.echo(f"✓ Switched to branch '{action.name}'")
    else:
        typer.echo(f"→ Continuing on '{current}'")
    return True


def suggest_branch_name(api_key: str, model: str, message: str) -> str:
    try:
        return generate_branch_suggestion(api_key, model, message)
    except LLMError as e:
        logger.info("Branch suggestion failed, using fallback: {}", e)
        return generate_fallback_branch(message)


def commit_interactively(
    message: str,
    api_key: str,
    model: str,
    config: CommitterConfig,
    show_branch_option: bool = True,
) -> bool:
    """Run the [y]/[n]/[e]/[b] loop.

    Returns:
        True if a commit was made.
    """
    current_message = message

    while True:
        action = prompt_commit(current_message, show_branch_option)

        if action.choice is CommitChoice.COMMIT:
            run_git_commit(action.message)
            typer.echo("✓ Committed")
            return True

        if action.choice is CommitChoice.CANCEL:
            typer.echo("Cancelled.")
            return False

        current_message = action.message
        typer.echo("Generating branch name...", err=True)
        suggested = suggest_branch_name(api_key, model, current_message)
        current = get_current_branch()
        typer.echo(f"🌿 Suggested branch: {suggested}")
        typer.echo()

        branch_action = prompt_branch_action(current, suggested, "", False)
        if branch_action.create:
            create_and_switch_branch(branch_action.name)
            typer.echo(f"✓ Switched to branch '{branch_action.name}'")
        else:
            typer.echo(f"→ Continuing on '{current}'")

        if config.commit_after_branch and branch_action.create:
            run_git_commit(current_message)
            typer.echo("✓ Committed")
            return True

        typer.echo()
        typer.echo(current_message)
        show_branch_option = False


def commit_staged_changes(
    api_key: str,
    config: CommitterConfig,
    model: str,
    repo_root: Path,
    yes: bool = False,
) -> bool:
    """Generate a message for the staged changes and commit after confirmation.

    Returns:
        True if a commit was made.
    """
    result = generate_message(api_key, config, model, DiffScope.STAGED, repo_root)
    message = result.message.cleaned_text

    if yes or config.auto_commit:
        run_git_commit(message)
        typer.echo("✓ Committed")
        return True
    return commit_interactively(message, api_key, model, config)


def main_command(
    ctx: typer.Context,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Commit without asking for confirmation",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-d",
        help="Only print the generated message",
    ),
    all_changes: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Stage all changes first (with --dry-run: preview them without staging)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="OpenRouter model to use (overrides config)",
    ),
    branch: bool = typer.Option(
        False,
        "--branch",
        "-b",
        help="Check whether the commit fits the current branch and offer a new one",
    ),
    auto_branch: bool = typer.Option(
        False,
        "--auto-branch",
        "-B",
        help="Like --branch, but switch to the suggested branch without asking",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Report excluded and truncated files",
    ),
    max_diff_bytes: Optional[int] = typer.Option(
        None,
        "--max-diff-bytes",
        min=1,
        help="Byte budget for the diff sent to the model (overrides config)",
    ),
) -> None:
    """Generate a conventional commit message from staged changes."""
    # Runs before every subcommand too; .env values never override the environment
    load_dotenv()

    # If a subcommand is invoked, don't run the default behavior
    if ctx.invoked_subcommand is not None:
        return

    config = load_config_or_exit()
    if max_diff_bytes:
        config = config.model_copy(update={"max_diff_bytes": max_diff_bytes})
    setup_logging(effective_verbose(verbose, config))
    model = effective_model(model, config)

    api_key = require_api_key()

    try:
        repo_root = get_repo_root()

        scope = DiffScope.STAGED
        if all_changes:
            if dry_run:
                scope = DiffScope.ALL
            else:
                stage_all_changes()

        result = generate_message(api_key, config, model, scope, repo_root)
        message = result.message.cleaned_text

        branch_handled = False
        if branch or auto_branch:
            branch_handled = check_branch_alignment(
                api_key,
                model,
                message,
                result.diff.file_summary if result.diff else "",
                auto=auto_branch or yes,
                dry_run=dry_run,
            )

        if dry_run:
            return

        if yes or config.auto_commit:
            run_git_commit(message)
            typer.echo("✓ Committed")
        else:
            commit_interactively(message, api_key, model, config, show_branch_option=not branch_handled)

    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)
    except LLMError as e:
        report_llm_error(e)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
