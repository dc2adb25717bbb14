"""Configuration schema for pygiven using Pydantic."""

from __future__ import annotations

from pydantic import BaseModel, Field


DEFAULT_REPORTS_DESTINATION = ".pygiven-reports"


class ReportsConfig(BaseModel):
    """Where scenario report files are written."""

    destination: str = DEFAULT_REPORTS_DESTINATION


class HtmlReportConfig(BaseModel):
    """HTML report viewer configuration."""

    directory: str = "jGiven-report"
    app_archive: str = "jgiven-html5-report.jar"  # Archive holding the viewer's app.zip
    title: str = "J(s)Given Report"


class PyGivenConfig(BaseModel):
    """Root configuration model for pygiven."""

    version: int = 1
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
    html: HtmlReportConfig = Field(default_factory=HtmlReportConfig)

    @classmethod
    def get_default(cls) -> "PyGivenConfig":
        """Return default configuration."""
        return cls()
