"""Serial job execution."""

from .serial_queue import QueuedJob, SerialExecutionQueue

__all__ = ["QueuedJob", "SerialExecutionQueue"]
