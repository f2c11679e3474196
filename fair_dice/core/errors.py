"""
errors.py
Exception taxonomy for the fair dice core.
Related modules:
- die.py: ConfigurationError, DuplicateNameError, DieNotFoundError.
- commitment.py / protocol.py: InvalidStateError, VerificationError.
"""


class ConfigurationError(ValueError):
    """
    Raised when dice configuration is malformed (a token that is not exactly six integers,
    too few dice, or the same die given twice). Detected before any protocol step.
    """
    pass


class InvalidStateError(RuntimeError):
    """
    Raised when a commit/reveal lifecycle step is called out of order
    (reveal before commit, commit twice, reveal before the contribution is fixed).
    """
    pass


class VerificationError(Exception):
    """
    Raised when a revealed (index, key) does not reproduce the published commitment.
    Callers must treat this as fatal and never retry the draw.
    """
    pass


class DiceLookupError(LookupError):
    """Base class for DiceSet name errors."""
    pass


class DuplicateNameError(DiceLookupError):
    """Raised when a die name is added to a DiceSet twice."""
    pass


class DieNotFoundError(DiceLookupError, KeyError):
    """Raised when a DiceSet has no die with the requested name."""
    pass
