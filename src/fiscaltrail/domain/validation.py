"""Eligibility checks for contracts and documents."""

from .models import Contract, Document, ValidationResult
from .window import HistoricalWindowPolicy


class EntityValidator:
    """Validates entities before they take part in reconstruction.

    Checks are pure: every violated rule adds one error and nothing is
    raised. Callers decide whether to skip or abort.
    """

    def __init__(self, policy: HistoricalWindowPolicy) -> None:
        self.policy = policy

    def validate_document(self, document: Document) -> ValidationResult:
        result = ValidationResult()
        meta = document.metadata

        issue_date = document.issue_date
        if issue_date is None:
            result.errors.append("Issue date is required for historical documents")
        elif not self.policy.is_in_window(issue_date):
            result.errors.append(
                "Issue date must be within the allowed historical range "
                f"(from {self.policy.minimum_date().isoformat()})"
            )

        amount = document.amount
        if amount is None or amount <= 0:
            result.errors.append("Amount must be greater than 0")

        if not meta.entity_type or meta.entity_id is None:
            result.errors.append(
                "Document must be attributed to an entity (property, contract, ...)"
            )

        year = document.exercise_year
        if year is not None and not self.policy.exercise_year_allowed(year):
            result.errors.append(
                f"Exercise year {year} is outside the allowed historical range"
            )

        return result

    def validate_contract(
        self, contract: Contract, check_window: bool = True
    ) -> ValidationResult:
        """Check a contract's terms and, unless disabled, its dates against the window.

        Without the window checks a lease that started before the window
        (or ended after it) still passes; its rent is clipped to the window
        downstream.
        """
        result = ValidationResult()

        if contract.start_date is None:
            result.errors.append("Start date is required for historical contracts")
        elif check_window and not self.policy.is_in_window(contract.start_date):
            result.errors.append(
                "Start date must be within the allowed historical range "
                f"(from {self.policy.minimum_date().isoformat()})"
            )

        if (
            check_window
            and contract.end_date is not None
            and not self.policy.is_in_window(contract.end_date)
        ):
            result.errors.append("End date must be within the allowed historical range")

        if contract.monthly_rent is None or contract.monthly_rent <= 0:
            result.errors.append("Monthly rent must be greater than 0")

        if contract.property_id is None:
            result.errors.append("Contract must be attributed to a property")

        day = contract.payment_day
        if day is None or not 1 <= day <= 31:
            result.errors.append("Payment day must be between 1 and 31")

        return result
