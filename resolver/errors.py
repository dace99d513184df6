"""
Error taxonomy for the resource browser.

    ResolverError
    ├── MetadataLoadError    metadata.json unavailable; fatal until retried
    ├── ResourceBatchError   subjects/notes/classes missing for a regulation
    └── ValidationError      a document does not have the expected shape

Missing project lists are not errors: the fetcher maps them to [].
"""


class ResolverError(Exception):
    """Base class for every error raised by this project."""


class MetadataLoadError(ResolverError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Could not load metadata.json: {reason}")


class ResourceBatchError(ResolverError):
    def __init__(self, regulation: str, missing: list[str]):
        self.regulation = regulation
        self.missing    = list(missing)
        super().__init__(
            f"Error loading resources for {regulation}: {', '.join(self.missing)} unavailable."
        )


class ValidationError(ResolverError):
    """
    Raised when a document parses as JSON but has the wrong shape.

    `path` points at the offending field, e.g. "subjects.json[2].code",
    so a data author can find the broken record.
    """

    def __init__(self, path: str, message: str):
        self.path    = path
        self.message = message
        super().__init__(f"{path}: {message}")
