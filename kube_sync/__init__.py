"""
kube-sync reconciles kubernetes objects for the redis failover operator.

Each resource kind the operator manages has a service that fetches the live
object, compares it to a desired object and creates or updates it.
"""

__all__ = [
    "client",
    "config",
    "exceptions",
    "kinds",
    "manifest",
    "metrics",
    "service",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
