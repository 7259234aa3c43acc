from typing import List, Optional

from src.core.models import CheckResult, OverallOutcome
from src.core.orders.models import CheckPanel

OUTCOME_LABELS = {
    "hard": "Blocked",
    "soft": "Approval Required",
    "warning": "Warning",
    "pass": "Pass",
}


def summarize_checks(checks: List[CheckResult], outcome: OverallOutcome) -> Optional[CheckPanel]:
    """Panel view over engine output. No panel is shown when no checks ran."""
    if not checks:
        return None
    issues = [check for check in checks if check.severity != "pass"]
    passed_count = len(checks) - len(issues)
    if outcome == "pass":
        headline = "Pre-Trade Check: All Passed"
    else:
        plural = "s" if len(issues) > 1 else ""
        headline = f"Pre-Trade Check: {len(issues)} issue{plural} found"
    return CheckPanel(
        outcome=outcome,
        label=OUTCOME_LABELS[outcome],
        headline=headline,
        issues=issues,
        passed_count=passed_count,
        expanded_by_default=outcome != "pass",
    )
