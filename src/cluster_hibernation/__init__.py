"""Cluster Hibernation - Root Package.

This package puts the compute instances of a managed cluster to sleep and
wakes them back up, across any number of cloud providers.

Each supported cloud registers a hibernation actuator that knows how to
list, stop and start the instances of a cluster. Raw provider statuses are
normalized into a small set of canonical lifecycle states so that every
provider gets the same stop/start/observe semantics.

Key Components:
    - domain: Cluster identity, instance model, lifecycle states and errors
    - infrastructure: Provider capability port, actuator registry, logging
    - providers: IBM Cloud VPC and AWS EC2 adapters
    - application: Hibernation driver used by reconciliation loops
    - config: Configuration schemas and loading
"""

from ._version import __version__

__author__ = "Cluster Hibernation Maintainers"

__all__ = ["__version__"]
