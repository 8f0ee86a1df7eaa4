"""Prompt template for streamed pull request descriptions."""

USER_PROMPT_TEMPLATE_PR = """Write a pull request title and description for merging branch "{branch}" into "{base}".

FORMAT:
<title>

## Summary
<1-3 sentences on what the pull request does and why>

## Changes
- <bullet per notable change>

Rules:
- The FIRST line is the title: Conventional Commits style "<type>(<scope>): <subject>", <=72 chars,
  type one of: {types}.
- Output ONLY the title and description. No markdown fences around the whole answer.
- Use the commit list for intent and the diff for facts. Only describe changes shown.

Commits on this branch, oldest first:
<commits>
{commits}
</commits>

Changed files (A added, M modified, D deleted, R renamed):
<files>
{files}
</files>

<diff>
{diff}
</diff>"""
