"""
Data models for the apply-link scraper
Defines job records, credentials, site settings and step outcomes
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# Sentinels written into JobRecord fields
JOB_URL_FAILED = "Failed to access"
APPLY_URL_NOT_FOUND = "Not found"
APPLY_URL_REDIRECT_TIMEOUT = "Redirect failed - timeout"
APPLY_URL_REDIRECT_ERROR = "Redirect failed - error"
APPLY_URL_PROCESSING_FAILED = "Processing failed"


class JobRecord(BaseModel):
    """One processed listing row, as written to the results file"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    job_index: int = Field(alias="jobIndex", ge=1)
    job_url: str = Field(alias="jobUrl")
    company_apply_url: str = Field(alias="companyApplyUrl")

    @classmethod
    def failed(cls, job_index: int) -> "JobRecord":
        """Record for a row that could not be processed at all"""
        return cls(
            job_index=job_index,
            job_url=JOB_URL_FAILED,
            company_apply_url=APPLY_URL_PROCESSING_FAILED,
        )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        return f"Job {self.job_index}: {self.company_apply_url}"


class Credentials(BaseModel):
    """Account used once to log in; never persisted"""

    model_config = ConfigDict(frozen=True)

    email: str
    password: str = Field(repr=False)


class SiteConfig(BaseModel):
    """Target site URLs. Absolute URLs are base + path concatenations."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    login_path: str
    search_path: str
    apply_path: str
    job_path_marker: str = "/job/"

    @property
    def login_url(self) -> str:
        return f"{self.base_url}{self.login_path}"

    @property
    def search_url(self) -> str:
        return f"{self.base_url}{self.search_path}"

    @property
    def apply_base_url(self) -> str:
        return f"{self.base_url}{self.apply_path}"


class SettleResult(str, Enum):
    """Which side of a settle wait won: network quiet or the fallback timer"""

    SETTLED = "settled"
    TIMED_OUT = "timed_out"


class LoginResult(str, Enum):
    SUCCESS = "success"
    FIELDS_NOT_FOUND = "fields_not_found"
    SUBMIT_NOT_FOUND = "submit_not_found"
    NAVIGATION_FAILED = "navigation_failed"
    INTERACTION_FAILED = "interaction_failed"


class RedirectStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_APPLICABLE = "not_applicable"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


_STATUS_SENTINELS = {
    RedirectStatus.NOT_APPLICABLE: APPLY_URL_NOT_FOUND,
    RedirectStatus.TIMED_OUT: APPLY_URL_REDIRECT_TIMEOUT,
    RedirectStatus.FAILED: APPLY_URL_REDIRECT_ERROR,
}


class RedirectOutcome(BaseModel):
    """Result of resolving one job detail URL to the employer's apply URL"""

    model_config = ConfigDict(frozen=True)

    status: RedirectStatus
    url: Optional[str] = None  # final URL when resolved
    trigger_url: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def resolved(cls, url: str, trigger_url: str) -> "RedirectOutcome":
        return cls(status=RedirectStatus.RESOLVED, url=url, trigger_url=trigger_url)

    @classmethod
    def not_applicable(cls, reason: str) -> "RedirectOutcome":
        return cls(status=RedirectStatus.NOT_APPLICABLE, reason=reason)

    @classmethod
    def timed_out(cls, trigger_url: str, reason: str) -> "RedirectOutcome":
        return cls(status=RedirectStatus.TIMED_OUT, trigger_url=trigger_url, reason=reason)

    @classmethod
    def failed(cls, reason: str, trigger_url: Optional[str] = None) -> "RedirectOutcome":
        return cls(status=RedirectStatus.FAILED, trigger_url=trigger_url, reason=reason)

    def apply_url_value(self) -> str:
        """String stored in JobRecord.company_apply_url"""
        if self.status == RedirectStatus.RESOLVED:
            return self.url or ""
        return _STATUS_SENTINELS[self.status]

    def __str__(self) -> str:
        return f"{self.status.value}: {self.apply_url_value()}"
