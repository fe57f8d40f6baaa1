"""Error taxonomy for flow engine and services."""


class DreamWizardError(Exception):
    """Base class for all dreamwizard errors."""


class OutOfRangeError(DreamWizardError, IndexError):
    """Step index outside the step sequence. Indicates a programming error."""


class InvalidStateError(DreamWizardError, RuntimeError):
    """Intent issued in a phase that does not accept it (e.g. after completion)."""


class InternalInvariantError(DreamWizardError, RuntimeError):
    """An internal invariant was violated, such as a narrative table miss."""


class PurchaseError(DreamWizardError):
    """Purchase capability failure, shown to the user as a retryable message."""
