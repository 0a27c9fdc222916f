"""FastMCP server exposing the CRD browsing tools."""

from fastmcp import FastMCP

from crdviz.schema_tree import MAX_DEPTH
from crdviz.tools import register_crd_browser_tools


def create_server(name: str = "crdviz", max_depth: int = MAX_DEPTH) -> FastMCP:
    server = FastMCP(name=name)
    register_crd_browser_tools(server, max_depth=max_depth)
    return server
