"""Hibernation driver."""

from .driver import HibernationDriver

__all__ = ["HibernationDriver"]
