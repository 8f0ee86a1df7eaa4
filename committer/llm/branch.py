"""Branch intelligence through the LLM.

Contains:
- BranchAnalysis: Whether a commit belongs on the current branch
- analyze_branch_alignment: Ask the model whether the commit fits the branch
- generate_branch_suggestion: Ask the model for a branch name

Both are short, non-streaming calls through the OpenAI SDK pointed at
OpenRouter.
"""

from typing import Optional

from openai import OpenAI
from pydantic import BaseModel, ValidationError, field_validator

from committer.branch import PROTECTED_BRANCHES, clean_branch_name
from committer.config import APP_TITLE, APP_URL, OPENROUTER_BASE_URL
from committer.llm.exceptions import JSONParseError, LLMError, MissingAPIKeyError
from committer.llm.parsing import parse_json_response
from committer.llm.prompts import (
    BRANCH_ANALYSIS_PROMPT,
    BRANCH_NAMING_CONVENTION,
    BRANCH_SUGGESTION_PROMPT,
)
from committer.llm.request import escape_data

BRANCH_MAX_TOKENS = 300


class BranchAnalysis(BaseModel):
    """Result of analyzing whether a commit belongs on the current branch.

    Attributes:
        matches: True if the commit aligns with the branch's purpose.
        reason: Explanation of the analysis result.
        suggested_branch: Suggested branch name if there's a mismatch.
    """

    matches: bool
    reason: str = ""
    suggested_branch: Optional[str] = None

    @field_validator("suggested_branch", mode="before")
    @classmethod
    def clean_suggestion(cls, v):
        """Normalize blank suggestions to None."""
        if v is None:
            return None
        return clean_branch_name(str(v))


def _complete(api_key: str, model: str, prompt: str) -> str:
    if not api_key:
        raise MissingAPIKeyError("An OpenRouter API key is required.")

    client = OpenAI(api_key=api_key, base_url=OPENROUTER_BASE_URL)

    try:
        response = client.chat.completions.create(
            model=model,
            max_tokens=BRANCH_MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
            extra_headers={
                "HTTP-Referer": APP_URL,
                "X-Title": APP_TITLE,
            },
        )
        return response.choices[0].message.content or ""
    except Exception as e:
        raise LLMError(f"OpenRouter API call failed: {e}")


def analyze_branch_alignment(
    api_key: str,
    model: str,
    current_branch: str,
    commit_message: str,
    files: str,
    recent_commits: list[str],
) -> BranchAnalysis:
    """Ask the model whether a commit belongs on the current branch.

    Args:
        api_key: OpenRouter API key.
        model: Model identifier.
        current_branch: Name of the checked-out branch.
        commit_message: The generated commit message.
        files: One-line-per-file summary of the change.
        recent_commits: Recent commit subjects on the branch.

    Returns:
        The parsed BranchAnalysis.

    Raises:
        LLMError: If the call fails.
        JSONParseError: If the answer is not the expected JSON.
    """
    prompt = BRANCH_ANALYSIS_PROMPT.format(
        current_branch=escape_data(current_branch),
        recent_commits=escape_data("\n".join(recent_commits) or "(none)"),
        files=escape_data(files),
        commit_message=commit_message,
        protected=", ".join(PROTECTED_BRANCHES),
        convention=BRANCH_NAMING_CONVENTION,
    )
    raw_response = _complete(api_key, model, prompt)
    parsed = parse_json_response(raw_response)

    try:
        return BranchAnalysis(**parsed)
    except ValidationError as e:
        raise JSONParseError(
            f"Branch analysis does not match expected schema.\n"
            f"Error: {e}\n"
            f"Parsed JSON: {parsed}"
        )


def generate_branch_suggestion(api_key: str, model: str, commit_message: str) -> str:
    """Ask the model for a branch name matching a commit message.

    Raises:
        LLMError: If the call fails or returns no usable name.
    """
    prompt = BRANCH_SUGGESTION_PROMPT.format(
        commit_message=commit_message,
        convention=BRANCH_NAMING_CONVENTION,
    )
    name = clean_branch_name(_complete(api_key, model, prompt))
    if not name:
        raise LLMError("Empty branch name returned")
    return name
