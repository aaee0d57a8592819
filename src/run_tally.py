"""
Run Tally - outcome counts for one extraction run

Every appended record lands in exactly one bucket: resolved, not found, or
failed (item errors, redirect timeouts and redirect errors).
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
from models import LoginResult, RedirectStatus


def _empty_outcomes() -> Dict[RedirectStatus, int]:
    return {status: 0 for status in RedirectStatus}


@dataclass
class RunTally:
    login_result: Optional[LoginResult] = None
    listings_found: int = 0
    listings_to_process: int = 0
    attempted: int = 0
    outcomes: Dict[RedirectStatus, int] = field(default_factory=_empty_outcomes)
    items_failed: int = 0
    handler_error: Optional[str] = None

    # Copied from the components when the loop ends
    click_retries: int = 0
    return_failures: int = 0
    checkpoint_failures: int = 0
    screenshots_saved: int = 0

    def record_outcome(self, status: RedirectStatus) -> None:
        self.outcomes[status] += 1

    def record_item_failure(self) -> None:
        self.items_failed += 1

    @property
    def resolved(self) -> int:
        return self.outcomes[RedirectStatus.RESOLVED]

    @property
    def not_found(self) -> int:
        return self.outcomes[RedirectStatus.NOT_APPLICABLE]

    @property
    def failed(self) -> int:
        return (
            self.items_failed
            + self.outcomes[RedirectStatus.TIMED_OUT]
            + self.outcomes[RedirectStatus.FAILED]
        )

    def progress(self) -> str:
        """Running tally appended to per-job log lines"""
        return (
            f"attempted={self.attempted} resolved={self.resolved} "
            f"not_found={self.not_found} failed={self.failed}"
        )

    def summary(self) -> str:
        """One-line end-of-run summary"""
        login = self.login_result.value if self.login_result else "not attempted"
        parts = [
            f"login={login}",
            f"listings_found={self.listings_found}",
            f"processed={self.listings_to_process}",
            self.progress(),
            f"redirect_timeouts={self.outcomes[RedirectStatus.TIMED_OUT]}",
            f"click_retries={self.click_retries}",
            f"return_failures={self.return_failures}",
            f"checkpoint_failures={self.checkpoint_failures}",
            f"screenshots={self.screenshots_saved}",
        ]
        if self.handler_error:
            parts.append(f"aborted_by={self.handler_error}")
        return " ".join(parts)
