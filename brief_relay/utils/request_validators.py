from dataclasses import dataclass, field
from typing import Any, List, Optional

REQUIRED_FIELDS = ("name", "contact", "description")


@dataclass(frozen=True)
class SubmissionRequest:
    name: str
    contact: str
    description: str


@dataclass
class ValidationResult:
    is_valid: bool
    submission: Optional[SubmissionRequest] = None
    missing_fields: List[str] = field(default_factory=list)

    def require_submission(self) -> SubmissionRequest:
        if not self.submission:
            raise ValueError("Submission is missing")
        return self.submission


def validate_submission_request(payload: Any) -> ValidationResult:
    """
    Validate a landing page form submission

    Args:
        payload: Parsed JSON body. Anything that is not a dict counts as empty.

    Returns:
        ValidationResult with the extracted SubmissionRequest when valid
    """
    if not isinstance(payload, dict):
        payload = {}

    values = {}
    missing = []
    for field_name in REQUIRED_FIELDS:
        value = _extract_text(payload.get(field_name))
        if value is None:
            missing.append(field_name)
        else:
            values[field_name] = value

    if missing:
        return ValidationResult(
            is_valid=False,
            missing_fields=missing
        )

    return ValidationResult(is_valid=True, submission=SubmissionRequest(**values))


def _extract_text(value: Any) -> Optional[str]:
    """Return the stripped string, or None when the field is absent or blank"""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
