"""
utils.py

Support utilities for orchestrator logic: safe summaries for log lines.
"""

from typing import Any, Dict, Optional

MAX_SNIPPET_LENGTH = 200


def snippet(text: Optional[str], limit: int = MAX_SNIPPET_LENGTH) -> str:
    if text is None:
        return "[none]"
    if len(text) <= limit:
        return text
    return f"{text[:limit]}...({len(text) - limit} more chars)"


def message_summary(payload: Optional[Dict[str, Any]]) -> str:
    """
    Generates a brief readable summary of a clouddriver response for logging.
    """
    if not payload or not isinstance(payload, dict):
        return "[Invalid or empty payload]"

    keys_to_highlight = ["id", "resourceUri", "status", "message"]
    summary_parts = [f"{key}={payload[key]}" for key in keys_to_highlight if key in payload]

    return " | ".join(summary_parts) or f"{list(payload.keys())[:3]}..."
