"""Handler modules for secrets."""

# Import handlers to register them - handlers register themselves via @kopf decorators
from . import secret  # noqa: F401
