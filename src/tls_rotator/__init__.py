"""TLS Rotator: keeps a three-generation history of a TLS key pair in a Kubernetes secret."""

__version__ = "0.1.0"
