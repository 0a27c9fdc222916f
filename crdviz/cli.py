"""Command line entry point for the crdviz MCP server."""

import argparse
import logging
import os
import sys
from typing import List, Mapping, Optional

from crdviz import __version__
from crdviz.k8s_config import ClusterSettings, configure
from crdviz.schema_tree import MAX_DEPTH
from crdviz.server import create_server

logger = logging.getLogger("crdviz")

TRANSPORTS = ("stdio", "http", "sse")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {value}")
    return number


def build_parser(environ: Optional[Mapping[str, str]] = None) -> argparse.ArgumentParser:
    """Argument parser whose defaults come from the environment."""
    environ = os.environ if environ is None else environ
    cluster = ClusterSettings.from_env(environ)

    parser = argparse.ArgumentParser(
        prog="crdviz",
        description="Browse the CustomResourceDefinitions of a Kubernetes cluster over MCP.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    group = parser.add_argument_group("cluster")
    group.add_argument(
        "--in-cluster", action="store_true", default=cluster.in_cluster,
        help="Use the pod's service account. Otherwise --kubeconfig is used.",
    )
    group.add_argument(
        "--kubeconfig", default=cluster.kubeconfig,
        help="Path to the kubeconfig file (default: %(default)s)",
    )
    group.add_argument(
        "--context", default=cluster.context,
        help="Kubeconfig context to use (default: current context)",
    )
    group.add_argument(
        "--request-timeout", type=_positive_float, default=cluster.request_timeout,
        help="Timeout in seconds for API server requests (default: %(default)s)",
    )

    transport = environ.get("CRDVIZ_TRANSPORT", "stdio").strip().lower()
    group = parser.add_argument_group("server")
    group.add_argument(
        "--transport", choices=TRANSPORTS,
        default=transport if transport in TRANSPORTS else "stdio",
        help="MCP transport (default: %(default)s)",
    )
    group.add_argument(
        "--host", default=environ.get("CRDVIZ_HOST", "0.0.0.0"),
        help="Bind address for the http and sse transports (default: %(default)s)",
    )
    group.add_argument(
        "--port", type=int, default=_env_int(environ, "CRDVIZ_PORT", 8080),
        help="Port for the http and sse transports (default: %(default)s)",
    )
    group.add_argument(
        "--max-depth", type=_positive_int,
        default=max(1, _env_int(environ, "CRDVIZ_MAX_DEPTH", MAX_DEPTH)),
        help="Deepest schema nesting level rendered (default: %(default)s)",
    )
    log_level = environ.get("CRDVIZ_LOG_LEVEL", "INFO").strip().upper()
    group.add_argument(
        "--log-level", choices=LOG_LEVELS, type=str.upper,
        default=log_level if log_level in LOG_LEVELS else "INFO",
        help="Log level (default: %(default)s)",
    )
    return parser


def cluster_settings(args: argparse.Namespace) -> ClusterSettings:
    return ClusterSettings(
        in_cluster=args.in_cluster,
        kubeconfig=args.kubeconfig,
        context=args.context,
        request_timeout=args.request_timeout,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # stdout carries the stdio transport, so logs go to stderr
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    configure(cluster_settings(args))
    server = create_server(max_depth=args.max_depth)

    if args.transport == "stdio":
        logger.info("Starting crdviz MCP server (stdio)")
        server.run(transport="stdio")
    else:
        logger.info(f"Starting crdviz MCP server ({args.transport} on {args.host}:{args.port})")
        server.run(transport=args.transport, host=args.host, port=args.port)
