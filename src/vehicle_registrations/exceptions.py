class RegistrationDataError(Exception):
    """Base exception for registration data errors."""
    pass

class DataNotLoadedError(RegistrationDataError):
    """Raised when the dataset is read before load() has completed."""
    pass

class DataFetchError(RegistrationDataError):
    """Raised when the source text for a period cannot be fetched."""

    def __init__(self, month: int, cause: Exception):
        super().__init__(f"Failed to fetch data for month {month}: {cause}")
        self.month = month
        self.cause = cause
