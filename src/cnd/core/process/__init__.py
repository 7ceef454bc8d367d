"""Process inspection used to decide whether a sync daemon is still running."""

from .inspector import (
    is_process_alive,
    read_pid_file,
)

__all__ = [
    "is_process_alive",
    "read_pid_file",
]
