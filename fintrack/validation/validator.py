"""
Pre-Dispatch Intent Validation

DESIGN DECISION: The reducer trusts its caller. Every rule that can
reject a user intent lives here and runs BEFORE an action is built:

FORM CHECKS:
- Required fields present
- Amounts positive, days in range
- Matching passwords on registration

INTEGRITY CHECKS:
- Accounts and cards with transactions cannot be deleted
- Default categories cannot be edited or deleted
- New transactions must target an existing, active account or card

IMPORTANT: Validation never raises and never fixes input.
It returns a ValidationResult and the caller decides what to show.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fintrack.models.entities import Category, TransactionType
from fintrack.queries.balances import (
    account_has_transactions,
    credit_card_has_transactions,
)
from fintrack.state.app_state import AppState


MIN_PASSWORD_LENGTH = 6


class ValidationIssue(BaseModel):
    """A single validation issue found."""
    model_config = ConfigDict(frozen=True)

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'in_use')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of one guard. Valid when no issue is an error."""
    model_config = ConfigDict(frozen=True)

    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def message(self) -> str:
        """All error messages, one per line. Empty when valid."""
        return "\n".join(
            issue.message for issue in self.issues if issue.severity == "error"
        )

    @classmethod
    def of(cls, issues: list[ValidationIssue]) -> "ValidationResult":
        return cls(issues=issues)


def _missing(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type="missing", message=message)


def _invalid(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, issue_type="invalid_value", message=message)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _check_amount(issues: list[ValidationIssue], amount: Optional[Decimal]) -> None:
    if amount is None:
        issues.append(_missing("amount", "Amount is required"))
    elif Decimal(amount).is_nan() or amount <= 0:
        issues.append(_invalid("amount", "Amount must be greater than zero"))


class IntentValidator:
    """
    Guards run before dispatching user intents.

    Stateless: guards that need to look at existing data take the
    current AppState as an argument.
    """

    # Entity forms

    def validate_account_form(
        self,
        bank_name: Optional[str],
        account_number: Optional[str],
    ) -> ValidationResult:
        issues = []
        if _blank(bank_name):
            issues.append(_missing("bank_name", "Bank name is required"))
        if _blank(account_number):
            issues.append(_missing("account_number", "Account number is required"))
        return ValidationResult.of(issues)

    def validate_credit_card_form(
        self,
        name: Optional[str],
        flag: Optional[str],
        last_four_digits: Optional[str] = None,
        invoice_closing_day: Optional[int] = None,
        invoice_due_day: Optional[int] = None,
    ) -> ValidationResult:
        issues = []
        if _blank(name) or _blank(flag):
            issues.append(_missing("name", "Name and flag are required"))

        if last_four_digits and (
            len(last_four_digits) > 4 or not last_four_digits.isdigit()
        ):
            issues.append(_invalid(
                "last_four_digits", "Last four digits must be up to 4 numbers"
            ))

        for field, day in (
            ("invoice_closing_day", invoice_closing_day),
            ("invoice_due_day", invoice_due_day),
        ):
            if day is not None and not 1 <= day <= 31:
                issues.append(_invalid(field, "Invoice days must be between 1 and 31"))

        return ValidationResult.of(issues)

    def validate_category_form(self, name: Optional[str]) -> ValidationResult:
        if _blank(name):
            return ValidationResult.of([
                _missing("name", "Category name cannot be empty")
            ])
        return ValidationResult()

    # Integrity guards

    def validate_category_update(self, existing: Optional[Category]) -> ValidationResult:
        """Default categories are read-only."""
        if existing is not None and existing.is_default:
            return ValidationResult.of([ValidationIssue(
                field="category",
                issue_type="read_only",
                message=f"Default category '{existing.name}' cannot be edited",
            )])
        return ValidationResult()

    def validate_category_deletion(self, category: Category) -> ValidationResult:
        if category.is_default:
            return ValidationResult.of([ValidationIssue(
                field="category",
                issue_type="read_only",
                message=f"Default category '{category.name}' cannot be deleted",
            )])
        return ValidationResult()

    def validate_account_deletion(self, state: AppState, account_id: str) -> ValidationResult:
        if account_has_transactions(account_id, state.transactions):
            return ValidationResult.of([ValidationIssue(
                field="account",
                issue_type="in_use",
                message=(
                    "Accounts with linked transactions cannot be deleted. "
                    "Delete the transactions first."
                ),
            )])
        return ValidationResult()

    def validate_credit_card_deletion(self, state: AppState, card_id: str) -> ValidationResult:
        if credit_card_has_transactions(card_id, state.transactions):
            return ValidationResult.of([ValidationIssue(
                field="credit_card",
                issue_type="in_use",
                message=(
                    "Cards with linked transactions cannot be deleted. "
                    "Delete the transactions first."
                ),
            )])
        return ValidationResult()

    # Transactions

    def validate_transaction_form(
        self,
        state: AppState,
        transaction_type: TransactionType,
        owner_id: Optional[str],
        description: Optional[str],
        amount: Optional[Decimal],
        date: Optional[dt.date],
        is_new: bool = True,
    ) -> ValidationResult:
        """
        Check a transaction before it is added or edited.

        owner_id is the account id for income/expense and the card id
        for credit card charges. Only new transactions must target an
        active owner; edits of old records on a since-deactivated
        account are allowed.
        """
        issues = []

        if _blank(owner_id):
            owner_field = "account_id" if transaction_type.uses_account else "credit_card_id"
            issues.append(_missing(owner_field, "Please choose where this transaction belongs"))
        elif transaction_type.uses_account:
            account = next((a for a in state.accounts if a.id == owner_id), None)
            if account is None:
                issues.append(_invalid("account_id", "Account does not exist"))
            elif is_new and not account.active:
                issues.append(_invalid("account_id", "Account is inactive"))
        else:
            card = next((c for c in state.credit_cards if c.id == owner_id), None)
            if card is None:
                issues.append(_invalid("credit_card_id", "Credit card does not exist"))
            elif is_new and card.inactive:
                issues.append(_invalid("credit_card_id", "Credit card is inactive"))

        if _blank(description):
            issues.append(_missing("description", "Description is required"))
        _check_amount(issues, amount)
        if date is None:
            issues.append(_missing("date", "Date is required"))

        return ValidationResult.of(issues)

    def validate_transfer(
        self,
        state: AppState,
        from_account_id: Optional[str],
        to_account_id: Optional[str],
        amount: Optional[Decimal],
        date: Optional[dt.date],
    ) -> ValidationResult:
        issues = []
        accounts = {a.id: a for a in state.accounts}

        if _blank(from_account_id) or _blank(to_account_id) or date is None:
            issues.append(_missing("transfer", "Please fill in all required fields"))
        else:
            if from_account_id == to_account_id:
                issues.append(_invalid(
                    "to_account_id", "Source and destination accounts must be different"
                ))
            for field, account_id in (
                ("from_account_id", from_account_id),
                ("to_account_id", to_account_id),
            ):
                account = accounts.get(account_id)
                if account is None:
                    issues.append(_invalid(field, f"Account does not exist: {account_id}"))
                elif not account.active:
                    issues.append(_invalid(field, f"Account is inactive: {account_id}"))

        _check_amount(issues, amount)
        return ValidationResult.of(issues)

    def validate_pay_invoice(
        self,
        state: AppState,
        credit_card_id: Optional[str],
        account_id: Optional[str],
        amount: Optional[Decimal],
        date: Optional[dt.date],
    ) -> ValidationResult:
        issues = []
        if _blank(credit_card_id) or _blank(account_id) or date is None:
            issues.append(_missing("invoice", "Please fill in all fields"))
        else:
            if not any(c.id == credit_card_id for c in state.credit_cards):
                issues.append(_invalid("credit_card_id", "Credit card does not exist"))
            account = next((a for a in state.accounts if a.id == account_id), None)
            if account is None:
                issues.append(_invalid("account_id", "Account does not exist"))
            elif not account.active:
                issues.append(_invalid("account_id", "Account is inactive"))
        _check_amount(issues, amount)
        return ValidationResult.of(issues)

    # Authentication

    def validate_registration(
        self,
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> ValidationResult:
        issues = []
        if _blank(email):
            issues.append(_missing("email", "Email is required"))
        if password != confirm_password:
            issues.append(_invalid("confirm_password", "Passwords do not match"))
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            issues.append(_invalid(
                "password",
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            ))
        return ValidationResult.of(issues)

    def validate_login(
        self,
        email: Optional[str],
        password: Optional[str],
    ) -> ValidationResult:
        issues = []
        if _blank(email):
            issues.append(_missing("email", "Email is required"))
        if not password:
            issues.append(_missing("password", "Password is required"))
        return ValidationResult.of(issues)
