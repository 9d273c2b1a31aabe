"""
Entry Validation

Checks a submitted form before anything is written.

Required:
- date must be non-empty
- amount must be present and coerce to a non-zero number

Validation NEVER fixes input. It reports issues and the engine rejects the
submission without touching state or storage.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from shop_ledger.models.entry import ZERO, EntryForm, EntryType, coerce_amount


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_type')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating one submitted form."""

    issues: list[ValidationIssue] = Field(default_factory=list)
    amount: Decimal = Field(
        default=ZERO,
        description="The submitted amount, coerced once for the engine to use"
    )

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


class EntryValidationError(Exception):
    """A submitted entry is missing required fields."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(issue.message for issue in result.errors)
        super().__init__(messages or "Entry is invalid")

    @property
    def issues(self) -> list[ValidationIssue]:
        return self.result.issues


class EntryValidator:
    """Validates a submitted EntryForm."""

    def validate(self, form: EntryForm) -> ValidationResult:
        issues = []

        if not form.date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
            ))

        amount = coerce_amount(form.amount)
        if amount.is_zero():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing" if form.amount in (None, "") else "invalid_value",
                message="Amount is required and must be a non-zero number",
                severity="error",
            ))

        # Unknown types are allowed but have no effect on the balance
        if EntryType.parse(form.type) is None:
            issues.append(ValidationIssue(
                field="type",
                issue_type="unknown_type",
                message=f"Type '{form.type}' is not IN, OUT or INOUT and will not change the balance",
                severity="warning",
            ))

        return ValidationResult(issues=issues, amount=amount)

    def check(self, form: EntryForm) -> ValidationResult:
        """Validate and raise EntryValidationError on any error."""
        result = self.validate(form)
        if not result.is_valid:
            raise EntryValidationError(result)
        return result
