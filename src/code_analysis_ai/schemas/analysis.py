"""Request and response schemas for the analysis API."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AnalysisType = Literal["general", "security", "performance", "maintainability"]
ProviderChoice = Literal["gemini", "groq", "huggingface", "auto"]

SUPPORTED_LANGUAGES = (
    "javascript",
    "typescript",
    "python",
    "java",
    "cpp",
    "c",
    "csharp",
    "php",
    "ruby",
    "go",
    "rust",
    "swift",
    "html",
    "css",
    "scss",
    "json",
    "markdown",
    "sql",
    "bash",
    "text",
)
ANALYSIS_TYPES = ("general", "security", "performance", "maintainability")
PROVIDER_CHOICES = ("gemini", "groq", "huggingface", "auto")

DEFAULT_LANGUAGE = "javascript"
DEFAULT_ANALYSIS_TYPE = "general"
DEFAULT_PROVIDER = "auto"


class AnalysisRequest(BaseModel):
    """Validated, normalized analysis request. Never mutated after construction."""

    code: str = Field(..., min_length=1, description="Source code, trimmed")
    language: str = Field(DEFAULT_LANGUAGE, description="Normalized language")
    analysis_type: AnalysisType = Field(DEFAULT_ANALYSIS_TYPE, description="Analysis focus")
    preferred_provider: ProviderChoice = Field(DEFAULT_PROVIDER, description="Provider hint")

    model_config = ConfigDict(frozen=True)


class OutcomeMetadata(BaseModel):
    """Provenance metadata attached to every successful outcome."""

    language: str
    analysis_type: str = Field(..., alias="analysisType")
    timestamp: str = Field(..., description="ISO-8601 completion time (UTC)")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class AnalysisOutcome(BaseModel):
    """Result text plus the provider that produced it."""

    analysis: str = Field(..., description="Raw provider response text")
    provider: str = Field(..., description="Name of the provider that produced the result")
    metadata: OutcomeMetadata

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "analysis": '{"quality_score": 8, "issues": [], "summary": "ok", "recommendations": []}',
                "provider": "Gemini",
                "metadata": {
                    "language": "javascript",
                    "analysisType": "general",
                    "timestamp": "2024-01-15T10:00:01.000000+00:00",
                },
            }
        },
    )


class _LenientBody(BaseModel):
    """Inbound bodies accept anything; normalization happens in utils.validation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AnalyzeBody(_LenientBody):
    code: Any = None
    language: Any = None
    analysis_type: Any = Field(None, alias="analysisType")
    preferred_provider: Any = Field(None, alias="preferredProvider")


class ExplainBody(_LenientBody):
    code: Any = None
    language: Any = None


class ImproveBody(_LenientBody):
    code: Any = None
    language: Any = None
    context: Any = ""


class ReportBody(_LenientBody):
    analysis_results: Any = Field(None, alias="analysisResults")
    project_info: Any = Field(None, alias="projectInfo")


class ProviderStatus(BaseModel):
    """Which providers are configured and in what order they will be tried."""

    available_providers: List[str]
    provider_configs: Dict[str, bool]


class ProjectInfo(BaseModel):
    name: Optional[str] = None
    language: Optional[str] = None
    framework: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(extra="allow")
