"""Secret store implementations."""

from .base import SecretStore
from .kubernetes import KubernetesSecretStore, get_core_v1_api

__all__ = ["SecretStore", "KubernetesSecretStore", "get_core_v1_api"]
