"""Browse the CustomResourceDefinitions registered in a Kubernetes cluster."""

__version__ = "0.1.0"
