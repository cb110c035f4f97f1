"""Domain exceptions shared by the catalog client and the watch controller."""


class StreamItError(Exception):
    """Base class for StreamIt failures."""

    user_message = "Something went wrong."


class MissingIdentifier(StreamItError):
    """The page was opened without a media id."""

    user_message = "No media ID provided."


class MediaNotFound(StreamItError):
    """The catalog has no record for the requested media or season."""

    user_message = "Media not found."

    def __init__(self, message: str = "", user_message: str | None = None):
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


class RetryableFetchError(StreamItError):
    """Transport or parse failure while talking to the catalog.

    Never retried automatically; a fresh user action is required.
    """

    user_message = "An error occurred while loading media details."

    def __init__(self, message: str, original_exception: Exception | None = None):
        super().__init__(message)
        self.original_exception = original_exception


class UnknownProvider(StreamItError):
    """A provider key that is not in the registry."""

    def __init__(self, key: str):
        super().__init__(f"Unknown provider '{key}'")
        self.key = key
