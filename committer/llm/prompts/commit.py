"""Conventional Commits prompt template for streamed commit messages.

The model answers in plain text (not JSON) so the message can be shown
token by token while it is generated.
"""

USER_PROMPT_TEMPLATE_COMMIT = """Write a git commit message for the staged changes below.

FORMAT:
<type>(<scope>): <subject>

<body>

Rules:
- Output ONLY the commit message. No markdown fences. No commentary before or after it.
- <type> is one of: {types}
  * feat: new feature or capability
  * fix: bug fix
  * docs: documentation only changes
  * style: formatting, whitespace (no logic change)
  * refactor: code change that neither fixes a bug nor adds a feature
  * perf: performance improvement
  * test: adding or updating tests
  * build: build system or external dependencies
  * chore: maintenance tasks, tooling
  * ci: CI configuration files and scripts
  * revert: reverting a previous commit
- <scope> is the component or module affected; leave out "(<scope>)" when unclear.
- Add "!" after the type or scope for breaking changes, e.g. "feat(api)!: drop v1 routes".
- Subject in imperative mood, lowercase start, no period at the end, whole first line <=72 chars.
- Body is optional: a blank line, then 1-5 "- " bullets saying what changed and why.
- Only describe changes shown in the diff. Do not infer or assume other changes.

Changed files (A added, M modified, D deleted, R renamed):
<files>
{files}
</files>

<diff>
{diff}
</diff>"""
