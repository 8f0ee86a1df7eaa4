"""JSON parsing utilities for non-streaming LLM responses.

Contains:
- strip_code_fence: Remove a markdown fence wrapping a whole response
- parse_json_response: Parse raw LLM response as JSON
"""

import json

from committer.llm.exceptions import JSONParseError


def strip_code_fence(text: str) -> str:
    """Remove a markdown code fence the model added around its output.

    Args:
        text: The raw response text.

    Returns:
        The text without the opening ```lang line and the closing ``` line,
        stripped of surrounding whitespace. Unfenced text is only stripped.
    """
    cleaned = text.strip()
    if not cleaned.startswith("```"):
        return cleaned

    lines = cleaned.split("\n")
    # Remove first line (```json or ```)
    lines = lines[1:]
    # Remove last line if it's ```
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def parse_json_response(raw_response: str) -> dict:
    """Parse the LLM response as JSON.

    Args:
        raw_response: The raw text response from the LLM.

    Returns:
        The parsed JSON as a dictionary.

    Raises:
        JSONParseError: If parsing fails or the payload is not an object.
    """
    cleaned = strip_code_fence(raw_response)

    # Find the first { and last } to drop chatter around the object
    first_brace = cleaned.find("{")
    last_brace = cleaned.rfind("}")

    if first_brace != -1 and last_brace != -1 and last_brace > first_brace:
        cleaned = cleaned[first_brace:last_brace + 1]

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise JSONParseError(
            f"Failed to parse LLM response as JSON.\n"
            f"Error: {e}\n"
            f"Raw response:\n{raw_response}"
        )

    if not isinstance(parsed, dict):
        raise JSONParseError(
            f"Expected a JSON object from the LLM.\nRaw response:\n{raw_response}"
        )
    return parsed
