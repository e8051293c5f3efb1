"""
Validation result models used by ExpenseValidator.

Only "error" issues block a command. Warnings and info travel back to
the caller alongside the accepted expense.
"""

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """One finding about one expense field."""

    field: str = Field(
        ...,
        description="Expense field the finding is about"
    )
    issue_type: str = Field(
        ...,
        description="Machine-readable kind (unknown_category, unbudgeted_category, future_date, suspicious_value)"
    )
    message: str = Field(
        ...,
        description="Text shown to the user"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="error blocks the command; warning and info do not"
    )


class ValidationResult(BaseModel):
    """Findings for one expense checked against one ledger."""

    is_valid: bool = Field(
        ...,
        description="False if any finding blocks the command"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="Findings in the order the checks ran"
    )

    def _with_severity(self, severity: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == severity]

    @property
    def has_errors(self) -> bool:
        return bool(self._with_severity("error"))

    @property
    def error_count(self) -> int:
        return len(self._with_severity("error"))

    @property
    def warnings(self) -> list[str]:
        """Messages of warning-level findings."""
        return [issue.message for issue in self._with_severity("warning")]
