"""Error types raised by the CRD browser.

The client, catalog and renderer raise these and never recover from them;
the tool layer turns them into user-facing responses.
"""

from typing import Optional


class CRDVizError(Exception):
    """Base class for all crdviz errors."""


class ConnectivityError(CRDVizError):
    """The cluster is unreachable or the credentials were not accepted."""


class RemoteAPIError(CRDVizError):
    """The cluster answered but rejected the request."""

    def __init__(self, message: str, status: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class ValidationError(CRDVizError):
    """The caller supplied an empty or invalid selector."""


class NotFoundError(CRDVizError):
    """No CRD with the requested name exists."""


class SchemaUnavailableError(CRDVizError):
    """The CRD exists but has no usable storage-version schema."""


class RequestCancelledError(CRDVizError):
    """The request was cancelled before the cluster was contacted."""
