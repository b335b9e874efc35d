"""Form 1040 variant detection from extracted PDF text."""

from enum import Enum


class FormType(str, Enum):
    """Form 1040 variants the upload pipeline recognizes."""
    FORM_1040 = "1040"
    FORM_1040_SR = "1040-SR"
    FORM_1040_NR = "1040-NR"
    FORM_1040_X = "1040-X"
    UNRECOGNIZED = "unrecognized"

    @property
    def is_supported(self) -> bool:
        return self not in (FormType.FORM_1040_X, FormType.UNRECOGNIZED)


# Checked in order. Boilerplate on every variant mentions "Form 1040", so the
# specific variants have to be tried before the generic markers; amended
# returns go first of all.
FORM_MARKERS: tuple[tuple[FormType, tuple[str, ...]], ...] = (
    (FormType.FORM_1040_X, ("1040-X", "1040X", "AMENDED U.S. INDIVIDUAL")),
    (FormType.FORM_1040_SR, ("1040-SR", "1040SR")),
    (FormType.FORM_1040_NR, ("1040-NR", "1040NR")),
    (FormType.FORM_1040, ("FORM 1040", "U.S. INDIVIDUAL INCOME TAX RETURN")),
)


def classify(text: str) -> FormType:
    """Identify which Form 1040 variant ``text`` was extracted from.

    Args:
        text: Text extracted from the leading pages of the document

    Returns:
        The matching FormType, or FormType.UNRECOGNIZED
    """
    upper_text = text.upper()

    for form_type, markers in FORM_MARKERS:
        if any(marker in upper_text for marker in markers):
            return form_type

    return FormType.UNRECOGNIZED
