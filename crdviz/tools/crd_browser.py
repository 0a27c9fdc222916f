"""CRD browsing tools.

Lets an operator walk the CRDs registered in a cluster: pick an API group,
pick a CRD within it, then inspect the full schema of its storage version.

Tools:
    list_crd_api_groups - API groups that own at least one CRD
    list_crds           - CRDs of one API group
    show_crd_schema     - Rendered field tree of a CRD's storage version schema
    detect_crd_api      - Check that the CRD API is reachable
"""

import logging
from typing import Any, Dict

from mcp.types import ToolAnnotations

from crdviz.catalog import CRDCatalog, storage_version
from crdviz.cluster import check_crd_api, fetch_all_crds
from crdviz.errors import (
    ConnectivityError,
    CRDVizError,
    NotFoundError,
    RemoteAPIError,
    SchemaUnavailableError,
)
from crdviz.schema_tree import MAX_DEPTH, count_fields, render

logger = logging.getLogger("crdviz")

CONNECTIVITY_HINT = (
    "Check the kubeconfig path and context, or --in-cluster when running in a pod"
)
PERMISSION_HINT = (
    "The identity in use needs permission to list "
    "customresourcedefinitions.apiextensions.k8s.io"
)


def _error_response(e: CRDVizError) -> Dict[str, Any]:
    response: Dict[str, Any] = {"success": False, "error": str(e)}
    if isinstance(e, ConnectivityError):
        response["hint"] = CONNECTIVITY_HINT
    elif isinstance(e, RemoteAPIError):
        response["hint"] = PERMISSION_HINT
        if e.status is not None:
            response["status"] = e.status
    elif isinstance(e, NotFoundError):
        response["hint"] = "Use list_crd_api_groups and list_crds to find available CRDs"
    elif isinstance(e, SchemaUnavailableError):
        response["hint"] = "The CRD does not publish an OpenAPI schema for its storage version"
    return response


def register_crd_browser_tools(server, max_depth: int = MAX_DEPTH):
    """Register the CRD browsing tools."""

    @server.tool(
        annotations=ToolAnnotations(
            title="List CRD API Groups",
            readOnlyHint=True,
        ),
    )
    def list_crd_api_groups(
        context: str = ""
    ) -> Dict[str, Any]:
        """List the API groups that own CRDs in the cluster.

        Start here, then pass one of the returned groups to list_crds.

        Args:
            context: Kubernetes context (uses current if not specified)
        """
        logger.info("Request to list CRD API groups")
        try:
            groups = sorted(CRDCatalog(fetch_all_crds, context).list_api_groups())
            return {
                "success": True,
                "context": context or "current",
                "count": len(groups),
                "groups": groups,
            }
        except CRDVizError as e:
            logger.error(f"Error listing CRD API groups: {e}")
            return _error_response(e)
        except Exception as e:
            logger.error(f"Error listing CRD API groups: {e}")
            return {"success": False, "error": str(e)}

    @server.tool(
        annotations=ToolAnnotations(
            title="List CRDs in API Group",
            readOnlyHint=True,
        ),
    )
    def list_crds(
        group: str,
        context: str = ""
    ) -> Dict[str, Any]:
        """List the CRDs registered under one API group.

        Example: list_crds(group="cert-manager.io")

        Args:
            group: API group (e.g., "postgresql.cnpg.io"). Required.
            context: Kubernetes context (uses current if not specified)
        """
        logger.info(f"Request to list CRDs (apiGroup: {group})")
        try:
            crds = CRDCatalog(fetch_all_crds, context).list_crds(group)
            return {
                "success": True,
                "context": context or "current",
                "group": group,
                "count": len(crds),
                "crds": [crd.summary() for crd in crds],
            }
        except CRDVizError as e:
            logger.error(f"Error listing CRDs: {e}")
            return _error_response(e)
        except Exception as e:
            logger.error(f"Error listing CRDs: {e}")
            return {"success": False, "error": str(e)}

    @server.tool(
        annotations=ToolAnnotations(
            title="Show CRD Schema",
            readOnlyHint=True,
        ),
    )
    def show_crd_schema(
        crd_name: str,
        context: str = ""
    ) -> Dict[str, Any]:
        """Show the full schema of a CRD's storage version as a field tree.

        Each field carries its name, type (with nullability), description,
        whether its parent requires it, and its nested fields. Array element
        schemas appear as a single child named "[]".

        Args:
            crd_name: Full CRD name (e.g., "certificates.cert-manager.io")
            context: Kubernetes context (uses current if not specified)
        """
        logger.info(f"Request to show CRD (CRD: {crd_name})")
        try:
            record, schema = CRDCatalog(fetch_all_crds, context).describe(crd_name)
            version = storage_version(record)
            tree = render(schema, field_name=record.kind or record.name, max_depth=max_depth)

            return {
                "success": True,
                "context": context or "current",
                "crd": record.summary(),
                "versions": [
                    {"name": v.name, "served": v.served, "storage": v.storage}
                    for v in record.versions
                ],
                "storageVersion": version.name,
                "fieldCount": count_fields(tree),
                "schema": tree.to_dict(),
            }
        except CRDVizError as e:
            logger.error(f"Error showing CRD schema: {e}")
            return _error_response(e)
        except Exception as e:
            logger.error(f"Error showing CRD schema: {e}")
            return {"success": False, "error": str(e)}

    @server.tool(
        annotations=ToolAnnotations(
            title="Detect CRD API Availability",
            readOnlyHint=True,
        ),
    )
    def detect_crd_api(
        context: str = ""
    ) -> Dict[str, Any]:
        """Detect if the CRD API is available in the cluster.

        Lightweight check that verifies the apiextensions.k8s.io API group
        is accessible. Use before the other tools to diagnose access problems.

        Args:
            context: Kubernetes context (uses current if not specified)
        """
        logger.info("Request to detect CRD API")
        try:
            has_crds = check_crd_api(context)
            return {
                "available": True,
                "message": "CRD API (apiextensions.k8s.io) is accessible",
                "hasCRDs": has_crds,
            }
        except CRDVizError as e:
            logger.error(f"Error detecting CRD API: {e}")
            response = _error_response(e)
            response["available"] = False
            return response
        except Exception as e:
            logger.error(f"Error detecting CRD API: {e}")
            return {
                "available": False,
                "error": str(e),
            }
