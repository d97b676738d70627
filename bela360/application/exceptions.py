class BookingError(RuntimeError):
    """Base class for booking commit failures."""
    pass


class ServiceNotFound(BookingError):
    """Raised when the requested service does not exist."""
    pass


class SlotUnavailable(BookingError):
    """Raised when the requested slot is no longer free. Callers should re-query and re-offer."""
    pass


class BookingFailed(BookingError):
    """Raised when the appointment could not be persisted."""
    pass


class RepositoryError(RuntimeError):
    """Raised by repository adapters on storage failures."""
    pass


class AppointmentConflictError(RepositoryError):
    """Raised when the storage layer detects an overlapping blocking appointment."""
    pass


class KeyValueStoreError(RuntimeError):
    """Raised by key-value adapters when the backend fails."""
    pass


class ConversationStoreError(RuntimeError):
    """Raised when conversation state could not be written."""
    pass
