"""Builders for target secrets."""

from .target import detach_target, initialize_target, rotate_target

__all__ = ["initialize_target", "rotate_target", "detach_target"]
