"""
Response formatting utilities.

JSON sanitization for oracle replies and item formatting for oracle prompts.
"""

import json
import logging
import re

logger = logging.getLogger(__name__)


def format_item_data(data: dict) -> str:
    """Format item attributes into a readable block for the oracle prompt."""
    lines = ["ITEM DATA:"]
    for key, value in data.items():
        if value:
            lines.append(f"- {key}: {value}")
    return "\n".join(lines)


def sanitize_json_response(text: str) -> str:
    """Clean up AI response text for JSON parsing."""
    text = (text or "").strip()
    if text.startswith("```"):
        lines = text.split("\n")
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    text = text.replace("```json", "").replace("```", "")

    replacements = {
        "\u2018": "'", "\u2019": "'", "\u201c": '"', "\u201d": '"',
        "\u00a0": " ",
    }
    for old, new in replacements.items():
        text = text.replace(old, new)

    # Extract the outermost JSON object or array if there's extra text before/after
    starts = [i for i in (text.find('{'), text.find('[')) if i >= 0]
    if starts:
        start = min(starts)
        closer = '}' if text[start] == '{' else ']'
        end = text.rfind(closer) + 1
        if start < end:
            text = text[start:end]

    # Try to parse - if it works, return as-is
    try:
        json.loads(text)
        return text.strip()
    except (json.JSONDecodeError, ValueError):
        # Trailing commas are the usual culprit
        text = re.sub(r',\s*([}\]])', r'\1', text)
        text = " ".join(text.split())
        return text.strip()
