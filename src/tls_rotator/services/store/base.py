"""Base secret store interface."""

from __future__ import annotations

from typing import Protocol

from ...models import SecretIdentity, SecretObject


class SecretStore(Protocol):
    """Protocol defining the secret operations the reconciler relies on.

    Every call may fail transiently; such failures are raised as
    ``RetryableError`` subclasses.
    """

    def get(self, identity: SecretIdentity, timeout: float | None = None) -> SecretObject | None:
        """Read a secret, returning None when it does not exist."""
        ...

    def create(self, secret: SecretObject, timeout: float | None = None) -> SecretObject:
        """Create a secret.

        Raises:
            AlreadyExistsError: If a secret with the same identity exists
        """
        ...

    def update(self, secret: SecretObject, timeout: float | None = None) -> SecretObject:
        """Replace a secret, conditional on its resource version.

        Raises:
            ConflictError: If the secret changed since it was read
        """
        ...
