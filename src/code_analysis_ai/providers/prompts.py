"""Prompt templates sent to the remote AI providers."""

import json
from typing import Any, Dict, List, Optional

_ANALYSIS_INTRO = (
    "Please analyze the following {language} code and provide insights based on the "
    "analysis type: {analysis_type}"
)

ANALYSIS_PROMPTS: Dict[str, str] = {
    "general": """{intro}

Please provide:
1. Code quality assessment (1-10 scale)
2. Potential bugs or issues
3. Performance considerations
4. Security vulnerabilities
5. Code maintainability
6. Suggestions for improvement
7. Best practices compliance

Format your response in JSON with the following structure:
{{
  "quality_score": number,
  "issues": [{{"type": "bug|performance|security|style", "severity": "low|medium|high", "description": "...", "line": number, "suggestion": "..."}}],
  "summary": "Overall assessment",
  "recommendations": ["..."]
}}""",
    "security": """{intro}

Focus on security analysis:
1. Identify security vulnerabilities
2. Check for common security anti-patterns
3. Assess input validation
4. Look for authentication/authorization issues
5. Check for data exposure risks

Format as JSON with security-specific findings.""",
    "performance": """{intro}

Focus on performance analysis:
1. Identify performance bottlenecks
2. Memory usage concerns
3. Algorithm efficiency
4. Database query optimization (if applicable)
5. Caching opportunities

Format as JSON with performance-specific findings.""",
    "maintainability": """{intro}

Focus on code maintainability:
1. Code readability and clarity
2. Documentation quality
3. Code organization and structure
4. Naming conventions
5. Complexity analysis
6. Refactoring suggestions

Format as JSON with maintainability-specific findings.""",
}

EXPLANATION_PROMPT = """Please explain the following {language} code in detail:

1. What does this code do? (high-level purpose)
2. How does it work? (step-by-step explanation)
3. Key concepts and patterns used
4. Input and output explanation
5. Dependencies and requirements
6. Potential use cases

Code to explain:
```{language}
{code}
```

Please provide a clear, educational explanation suitable for developers learning this code."""

IMPROVEMENT_PROMPT = """Please suggest improvements for the following {language} code:

Context: {context}

Focus on:
1. Code optimization
2. Best practices implementation
3. Readability improvements
4. Performance enhancements
5. Security hardening
6. Error handling improvements
7. Modern language features utilization

Please provide:
- Specific improvement suggestions
- Refactored code examples where applicable
- Explanation of why each improvement is beneficial

Code to improve:
```{language}
{code}
```"""

REPORT_PROMPT = """Generate a comprehensive code analysis report based on the following analysis results:

Analysis Results:
{results}

Project Information:
{project_info}

Please create a detailed report in markdown format that includes:
1. Executive Summary
2. Overall Code Quality Score
3. Key Findings
4. Security Assessment
5. Performance Analysis
6. Maintainability Score
7. Detailed Issues Breakdown
8. Recommendations and Action Items
9. Conclusion

Make the report professional and actionable for developers."""

# Completion-style models get short plain prompts.
COMPACT_ANALYSIS_PROMPT = (
    "Analyze this {language} code for quality, security, and performance issues. "
    "Provide specific recommendations:\n\n{code}"
)
COMPACT_EXPLANATION_PROMPT = "Explain what this {language} code does in simple terms:\n\n{code}"
COMPACT_IMPROVEMENT_PROMPT = (
    "Suggest improvements for this {language} code. Context: {context}\n\n"
    "Focus on:\n1. Performance optimizations\n2. Best practices\n"
    "3. Code quality improvements\n4. Security enhancements\n\nCode:\n{code}"
)


def build_analysis_prompt(code: str, language: str, analysis_type: str) -> str:
    intro = _ANALYSIS_INTRO.format(language=language, analysis_type=analysis_type)
    template = ANALYSIS_PROMPTS.get(analysis_type, ANALYSIS_PROMPTS["general"])
    return f"{template.format(intro=intro)}\n\nCode to analyze:\n```{language}\n{code}\n```"


def build_explanation_prompt(code: str, language: str) -> str:
    return EXPLANATION_PROMPT.format(language=language, code=code)


def build_improvement_prompt(code: str, language: str, context: str = "") -> str:
    return IMPROVEMENT_PROMPT.format(language=language, code=code, context=context)


def build_report_prompt(results: List[Any], project_info: Optional[Dict[str, Any]] = None) -> str:
    return REPORT_PROMPT.format(
        results=json.dumps(results, indent=2, default=str),
        project_info=json.dumps(project_info or {}, indent=2, default=str),
    )
