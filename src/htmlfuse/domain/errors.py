from __future__ import annotations

"""
Bundling Error Taxonomy.

Every failure that aborts a bundling run derives from BundleError so the
orchestrator can translate it into a failed result without catching
unrelated programming errors by accident.
"""


class BundleError(Exception):
    """Base class for failures that abort a bundling run."""


class LegacyMarkupError(BundleError):
    """
    Raised when a document uses the unsupported legacy component dialect.

    Attributes:
        path: Filesystem path (or URL) of the offending document.
    """

    def __init__(self, message: str, path: str):
        super().__init__(f"{message} File: {path}")
        self.path = path


class ResourceLoadError(BundleError):
    """
    Raised when the loader cannot read a resource.

    Attributes:
        url: The URL that failed to load.
    """

    def __init__(self, url: str, reason: str):
        super().__init__(f"Unable to load {url}: {reason}")
        self.url = url


class DependencyResolutionError(BundleError):
    """
    Raised when the dependencies of an excluded URL cannot be computed.

    Attributes:
        exclude: The excluded URL whose analysis failed.
    """

    def __init__(self, message: str, exclude: str):
        super().__init__(
            f"{message}. Could not read dependencies for excluded URL: {exclude}"
        )
        self.exclude = exclude
