"""Configuration for committer.

Holds the provider constants and the CommitterConfig model. Values are
loaded from ~/.config/committer/config.yaml by committer.global_config and
passed explicitly into the pipeline; nothing here reads process-wide state.
"""

from pydantic import BaseModel, Field, field_validator

from committer.diff import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MAX_DIFF_BYTES,
    ExclusionRule,
    FilePriority,
    parse_exclusion_rules,
)


# ============================================================
# PROVIDER
# ============================================================

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_API_URL = f"{OPENROUTER_BASE_URL}/chat/completions"
API_KEY_ENV_VAR = "OPENROUTER_API_KEY"

# Sent as HTTP-Referer / X-Title for OpenRouter app attribution
APP_URL = "https://github.com/nolanneff/committer"
APP_TITLE = "Committer"


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# Used when ~/.config/committer/config.yaml doesn't set a key

DEFAULT_MODEL = "google/gemini-3-flash-preview"
DEFAULT_IDLE_TIMEOUT = 60.0
DEFAULT_CONNECT_TIMEOUT = 10.0


class CommitterConfig(BaseModel):
    """User preferences.

    Attributes:
        auto_commit: Commit without asking once a message is generated.
        commit_after_branch: Commit right after creating a branch with [b].
        model: OpenRouter model identifier.
        verbose: Report excluded and truncated files.
        max_diff_bytes: Byte budget for the diff sent to the model.
        idle_timeout: Seconds without streamed bytes before giving up.
        file_priority: Order in which files get the diff budget.
        exclude: Exclusion patterns (exact names, *.suffix, dir/ or globs).
    """

    auto_commit: bool = False
    commit_after_branch: bool = False
    model: str = DEFAULT_MODEL
    verbose: bool = False
    max_diff_bytes: int = Field(default=DEFAULT_MAX_DIFF_BYTES, gt=0)
    idle_timeout: float = Field(default=DEFAULT_IDLE_TIMEOUT, gt=0)
    file_priority: FilePriority = FilePriority.DIFF_ORDER
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))

    @field_validator("model")
    @classmethod
    def model_not_empty(cls, v: str) -> str:
        """Ensure the model identifier is not blank."""
        v = v.strip()
        if not v:
            raise ValueError("model cannot be empty")
        return v

    @field_validator("exclude", mode="before")
    @classmethod
    def ensure_exclude_list(cls, v):
        """Treat a missing exclude list as the defaults."""
        if v is None:
            return list(DEFAULT_EXCLUDE_PATTERNS)
        return v

    def exclusion_rules(self) -> list[ExclusionRule]:
        return parse_exclusion_rules(self.exclude)

    def to_dict(self) -> dict:
        """Plain dictionary for YAML output."""
        return self.model_dump(mode="json")
