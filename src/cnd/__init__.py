"""
cnd - cloud native development environments

Tracks the development sessions attached to remote workloads from this
machine: which workload is being synced, from which local folder, and by
which sync daemon.
"""

__version__ = "0.4.0"
__all__ = ["__version__"]
