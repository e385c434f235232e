from .poller import TaskPoller, TRANSIENT_STATUS_ERRORS

__all__ = ["TaskPoller", "TRANSIENT_STATUS_ERRORS"]
