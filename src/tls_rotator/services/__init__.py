"""Service clients used by the reconciler."""
