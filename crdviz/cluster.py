"""Read the CRDs registered in the cluster.

Every call is a fresh request to the API server: nothing is cached and
nothing is retried. Failures surface immediately as typed errors.

The response body is decoded as plain JSON rather than into the client's
typed models, so CRD schemas are never walked as a whole here.
"""

import json
import logging
import threading
from typing import Any, Dict, List, Optional

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as TransportError

from crdviz.errors import (
    ConnectivityError,
    RemoteAPIError,
    RequestCancelledError,
)
from crdviz.k8s_config import get_apiextensions_client, get_settings
from crdviz.models import CRDRecord

logger = logging.getLogger("crdviz")


def _translate_api_exception(e: ApiException) -> Exception:
    if e.status == 401:
        return ConnectivityError(f"Cluster rejected the credentials: {e.reason}")
    if e.status == 403:
        return RemoteAPIError(
            f"Forbidden to list CustomResourceDefinitions: {e.reason}",
            status=e.status,
            reason=e.reason,
        )
    return RemoteAPIError(
        f"Cluster API error ({e.status}): {e.reason}",
        status=e.status,
        reason=e.reason,
    )


def _decode(body: Any) -> Dict[str, Any]:
    try:
        payload = json.loads(body)
    except RecursionError as e:
        raise RemoteAPIError("CRD list response is nested too deeply to decode") from e
    except ValueError as e:
        raise RemoteAPIError(f"CRD list response is not valid JSON: {e}") from e
    return payload if isinstance(payload, dict) else {}


def _list_crds(context: str, cancel_event: Optional[threading.Event], **kwargs: Any) -> List[Any]:
    if cancel_event is not None and cancel_event.is_set():
        raise RequestCancelledError("Request cancelled before contacting the cluster")

    api = get_apiextensions_client(context)
    try:
        response = api.list_custom_resource_definition(
            _preload_content=False,
            _request_timeout=get_settings().request_timeout,
            **kwargs,
        )
        body = response.data
    except ApiException as e:
        raise _translate_api_exception(e) from e
    except TransportError as e:
        raise ConnectivityError(f"Cluster unreachable: {e}") from e

    items = _decode(body).get("items")
    return items if isinstance(items, list) else []


def fetch_all_crds(
    context: str = "",
    cancel_event: Optional[threading.Event] = None,
) -> List[CRDRecord]:
    """Fetch every CRD currently registered in the cluster.

    Args:
        context: Kubernetes context (uses the configured one if empty)
        cancel_event: If already set, the cluster is not contacted. The MCP
            tools do not pass one; it is for library callers that run
            fetches on behalf of a cancellable request.

    Raises:
        ConnectivityError: cluster unreachable or credentials invalid.
        RemoteAPIError: the cluster rejected the request, or its response
            could not be decoded.
        RequestCancelledError: ``cancel_event`` was set.
    """
    items = _list_crds(context, cancel_event)
    logger.debug(f"Fetched {len(items)} CRDs from context '{context or 'current'}'")
    return [CRDRecord.from_dict(item) for item in items]


def check_crd_api(context: str = "") -> bool:
    """Return whether any CRD exists, using a single-item list call.

    Raises the same errors as :func:`fetch_all_crds`.
    """
    return len(_list_crds(context, None, limit=1)) > 0
