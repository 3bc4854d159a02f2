class EnrolmentError(Exception):
    """Base class for pre-enrolment calculation errors."""


class InvalidDateOfBirth(EnrolmentError, ValueError):
    """Raised when a date of birth is missing, malformed or in the future."""


class InvalidCalendar(EnrolmentError, ValueError):
    """Raised when a term table does not describe a valid academic year."""
