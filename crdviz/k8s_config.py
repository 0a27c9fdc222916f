"""Kubernetes client configuration.

Resolves how crdviz talks to the cluster: either the pod's service account
(in-cluster) or a kubeconfig file, optionally with an explicit context.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from kubernetes import client, config

from crdviz.errors import ConnectivityError

logger = logging.getLogger("crdviz")

DEFAULT_KUBECONFIG = os.path.join(os.path.expanduser("~"), ".kube", "config")
DEFAULT_REQUEST_TIMEOUT = 30.0

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(environ: Mapping[str, str], name: str) -> bool:
    return environ.get(name, "").strip().lower() in _TRUE_VALUES


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive {name}={raw!r}, using {default}")
        return default
    return value


@dataclass
class ClusterSettings:
    """How to reach the cluster."""

    in_cluster: bool = False
    kubeconfig: str = DEFAULT_KUBECONFIG
    context: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClusterSettings":
        environ = os.environ if environ is None else environ
        kubeconfig = environ.get("KUBECONFIG", "").strip()
        if os.pathsep in kubeconfig:
            # crdviz reads a single file; take the first entry of a path list
            kubeconfig = kubeconfig.split(os.pathsep)[0]
        return cls(
            in_cluster=_env_flag(environ, "CRDVIZ_IN_CLUSTER"),
            kubeconfig=kubeconfig or DEFAULT_KUBECONFIG,
            context=environ.get("CRDVIZ_CONTEXT", "").strip(),
            request_timeout=_env_float(
                environ, "CRDVIZ_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT
            ),
        )


_settings: Optional[ClusterSettings] = None


def configure(settings: ClusterSettings) -> None:
    """Install the settings used by every subsequent client lookup."""
    global _settings
    _settings = settings
    mode = "in-cluster" if settings.in_cluster else f"kubeconfig {settings.kubeconfig}"
    logger.info(f"Cluster access configured ({mode})")


def get_settings() -> ClusterSettings:
    global _settings
    if _settings is None:
        _settings = ClusterSettings.from_env()
    return _settings


def _build_api_client(settings: ClusterSettings, context: str) -> client.ApiClient:
    configuration = client.Configuration()
    if settings.in_cluster:
        config.load_incluster_config(client_configuration=configuration)
    else:
        config.load_kube_config(
            config_file=settings.kubeconfig or None,
            context=context or settings.context or None,
            client_configuration=configuration,
        )
    # one attempt per request; urllib3 would otherwise retry connection errors
    configuration.retries = False
    return client.ApiClient(configuration)


def get_apiextensions_client(context: str = "") -> client.ApiextensionsV1Api:
    """Return an apiextensions.k8s.io/v1 client.

    Args:
        context: Kubernetes context; overrides the configured one. Ignored
            when running in-cluster.

    Raises:
        ConnectivityError: if no usable cluster configuration can be loaded.
    """
    settings = get_settings()
    try:
        api_client = _build_api_client(settings, context)
    except (config.ConfigException, OSError) as e:
        source = "in-cluster service account" if settings.in_cluster else settings.kubeconfig
        raise ConnectivityError(
            f"Cannot load cluster configuration from {source}: {e}"
        ) from e
    return client.ApiextensionsV1Api(api_client)
