"""Helpers for reading structured data out of provider analysis text."""

import json
import re
from typing import Any, Dict, List, Optional

JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")

LANGUAGE_BY_EXTENSION = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".cs": "csharp",
    ".php": "php",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".swift": "swift",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".json": "json",
    ".md": "markdown",
    ".sql": "sql",
    ".sh": "bash",
}


def language_from_filename(filename: str) -> str:
    """Map a file name to an analysis language, ``text`` when unknown."""
    match = re.search(r"\.[^./\\]+$", filename)
    if not match:
        return "text"
    return LANGUAGE_BY_EXTENSION.get(match.group(0).lower(), "text")


def extract_json_from_analysis(analysis_text: str) -> Optional[Any]:
    """Parse the analysis as raw JSON, or from the first ```json fenced block.

    Returns None when neither form parses.
    """
    try:
        return json.loads(analysis_text)
    except (TypeError, ValueError):
        pass

    match = JSON_BLOCK_PATTERN.search(analysis_text or "")
    if not match:
        return None
    try:
        return json.loads(match.group(1).strip())
    except ValueError:
        return None


def summarize_analysis(parsed: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce a parsed analysis to score, issue counts and top recommendations."""
    issues: List[Any] = parsed.get("issues") if isinstance(parsed.get("issues"), list) else []
    recommendations = parsed.get("recommendations")
    if not isinstance(recommendations, list):
        recommendations = []

    critical = [
        issue
        for issue in issues
        if isinstance(issue, dict)
        and str(issue.get("severity", "")).lower() in ("critical", "high")
    ]
    score = parsed.get("quality_score")

    return {
        "quality_score": score if isinstance(score, (int, float)) else None,
        "summary": parsed.get("summary"),
        "total_issues": len(issues),
        "critical_issues": len(critical),
        # de-duplicated, order preserved
        "recommendations": list(dict.fromkeys(str(r) for r in recommendations))[:5],
    }


__all__ = [
    "LANGUAGE_BY_EXTENSION",
    "language_from_filename",
    "extract_json_from_analysis",
    "summarize_analysis",
]
