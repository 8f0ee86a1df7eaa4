"""LLM prompt templates.

This package contains all prompt templates:
- system: The shared system prompt
- commit: Conventional commit message (streamed, plain text)
- pr: Pull request title and description (streamed, plain text)
- branch: Branch alignment analysis and branch name suggestion
"""

from committer.llm.prompts.system import SYSTEM_PROMPT
from committer.llm.prompts.commit import USER_PROMPT_TEMPLATE_COMMIT
from committer.llm.prompts.pr import USER_PROMPT_TEMPLATE_PR
from committer.llm.prompts.branch import (
    BRANCH_ANALYSIS_PROMPT,
    BRANCH_NAMING_CONVENTION,
    BRANCH_SUGGESTION_PROMPT,
)


__all__ = [
    # System prompt
    "SYSTEM_PROMPT",
    # Streamed generation
    "USER_PROMPT_TEMPLATE_COMMIT",
    "USER_PROMPT_TEMPLATE_PR",
    # Branch intelligence
    "BRANCH_ANALYSIS_PROMPT",
    "BRANCH_NAMING_CONVENTION",
    "BRANCH_SUGGESTION_PROMPT",
]
