"""
Record Validation Module

Rule-based validation of order and display frames. Every rule describes the
rows it rejects, so a frame can be both summarized (``validate``) and split
into usable and rejected rows (``split``). A bad record is skipped and
logged; it never fails the whole request.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import polars as pl
import structlog

from dealer_insights.models.records import DisplayStatus

logger = structlog.get_logger(__name__)

REJECTION_REASON = "rejection_reason"


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Row is rejected
    WARNING = "warning"  # Logged, row is kept
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    details: Optional[Dict[str, Any]] = None
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100


@dataclass
class _Rule:
    name: str
    column: Optional[str]
    severity: ValidationSeverity
    failure: Callable[[], pl.Expr]
    message: str


class RecordValidator:
    """
    Row-level validator for record frames.

    Example:
        validator = RecordValidator()
        validator.add_not_null_check("sku")
        validator.add_positive_check("quantity")
        valid, rejected = validator.split(df)
    """

    def __init__(self, strict_mode: bool = False):
        self.strict_mode = strict_mode  # Fail on any warning
        self._rules: List[_Rule] = []

    def reset(self) -> None:
        """Reset validator state"""
        self._rules = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "RecordValidator":
        """Reject nulls (and blank strings) in column"""
        def failure() -> pl.Expr:
            col = pl.col(column)
            return col.is_null() | (col.cast(pl.Utf8).str.strip_chars() == "").fill_null(False)

        self._rules.append(_Rule(
            name=f"not_null_{column}",
            column=column,
            severity=severity,
            failure=failure,
            message=f"'{column}' is missing",
        ))
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "RecordValidator":
        """Reject values outside [min_value, max_value]; nulls are not judged"""
        def failure() -> pl.Expr:
            conditions = []
            if min_value is not None:
                conditions.append(pl.col(column) < min_value)
            if max_value is not None:
                conditions.append(pl.col(column) > max_value)
            if not conditions:
                return pl.lit(False)
            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond
            return combined.fill_null(False)

        self._rules.append(_Rule(
            name=f"range_{column}",
            column=column,
            severity=severity,
            failure=failure,
            message=f"'{column}' outside range [{min_value}, {max_value}]",
        ))
        return self

    def add_finite_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "RecordValidator":
        """Reject NaN and infinite values; nulls are not judged"""
        def failure() -> pl.Expr:
            return (~pl.col(column).cast(pl.Float64).is_finite()).fill_null(False)

        self._rules.append(_Rule(
            name=f"finite_{column}",
            column=column,
            severity=severity,
            failure=failure,
            message=f"'{column}' is not a finite number",
        ))
        return self

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "RecordValidator":
        """Reject negative values (and zero unless allowed)"""
        if allow_zero:
            return self.add_range_check(column, min_value=0, severity=severity)

        def failure() -> pl.Expr:
            return (pl.col(column) <= 0).fill_null(False)

        self._rules.append(_Rule(
            name=f"positive_{column}",
            column=column,
            severity=severity,
            failure=failure,
            message=f"'{column}' must be positive",
        ))
        return self

    def add_enum_check(
        self,
        column: str,
        allowed_values: List[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "RecordValidator":
        """Reject values outside the allowed set"""
        def failure() -> pl.Expr:
            return (~pl.col(column).is_in(allowed_values) & pl.col(column).is_not_null()).fill_null(False)

        self._rules.append(_Rule(
            name=f"enum_{column}",
            column=column,
            severity=severity,
            failure=failure,
            message=f"'{column}' not one of {allowed_values}",
        ))
        return self

    def add_custom_check(
        self,
        name: str,
        failure_expr: Callable[[], pl.Expr],
        message_on_fail: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "RecordValidator":
        """Add a rule from an expression that is true for failing rows"""
        self._rules.append(_Rule(
            name=name,
            column=None,
            severity=severity,
            failure=lambda: failure_expr().fill_null(False),
            message=message_on_fail,
        ))
        return self

    def _applicable(self, df: pl.DataFrame) -> List[_Rule]:
        return [r for r in self._rules if r.column is None or r.column in df.columns]

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation rules on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with one check per rule
        """
        started_at = datetime.utcnow()
        results = []
        total = len(df)

        for rule in self._rules:
            if rule.column is not None and rule.column not in df.columns:
                results.append(ValidationCheck(
                    name=rule.name,
                    passed=False,
                    severity=rule.severity,
                    message=f"Column '{rule.column}' not found",
                ))
                continue

            failed = df.filter(rule.failure()).height if total else 0
            passed = failed == 0
            results.append(ValidationCheck(
                name=rule.name,
                passed=passed,
                severity=rule.severity,
                message=f"{failed} rows: {rule.message}" if not passed else "Check passed",
                details={"failed_percentage": (failed / total) * 100 if total > 0 else 0},
                failed_rows=failed,
                total_rows=total,
            ))

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0 and self.strict_mode:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        return ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=datetime.utcnow(),
        )

    def split(self, df: pl.DataFrame) -> Tuple[pl.DataFrame, pl.DataFrame]:
        """
        Split a frame into rows that pass every ERROR rule and rows that don't.

        Rejected rows carry a ``rejection_reason`` column naming the rules they
        broke. WARNING rules are logged but never reject a row.
        """
        rules = self._applicable(df)
        errors = [r for r in rules if r.severity == ValidationSeverity.ERROR]
        warnings = [r for r in rules if r.severity == ValidationSeverity.WARNING]

        for rule in warnings:
            flagged = df.filter(rule.failure()).height
            if flagged:
                logger.warning("Validation warning", rule=rule.name, rows=flagged, message=rule.message)

        if not errors or df.is_empty():
            return df, df.clear().with_columns(pl.lit("").alias(REJECTION_REASON))

        reason = pl.concat_str(
            [pl.when(r.failure()).then(pl.lit(r.name)) for r in errors],
            separator=",",
            ignore_nulls=True,
        )
        any_failed = pl.any_horizontal([r.failure() for r in errors])

        valid = df.filter(~any_failed)
        rejected = df.filter(any_failed).with_columns(reason.alias(REJECTION_REASON))

        if rejected.height:
            logger.warning(
                "Rejected invalid records",
                rejected=rejected.height,
                total=df.height,
                reasons=sorted(set(rejected[REJECTION_REASON].to_list())),
            )

        return valid, rejected


# Pre-built validators for the engine's record frames
def create_orders_validator() -> RecordValidator:
    """Create pre-configured validator for order lines"""
    return (
        RecordValidator()
        .add_not_null_check("sku")
        .add_not_null_check("customer_id")
        .add_not_null_check("order_date")
        .add_not_null_check("collection_name")
        .add_not_null_check("quantity")
        .add_not_null_check("unit_price")
        .add_finite_check("quantity")
        .add_finite_check("unit_price")
        .add_positive_check("quantity")
        .add_positive_check("unit_price")
    )


def create_displays_validator() -> RecordValidator:
    """Create pre-configured validator for display records"""
    return (
        RecordValidator()
        .add_not_null_check("sku")
        .add_not_null_check("customer_id")
        .add_not_null_check("collection_name")
        .add_enum_check("status", [s.value for s in DisplayStatus])
        .add_positive_check("faces")
        .add_not_null_check("installed_at", severity=ValidationSeverity.WARNING)
    )
