"""Exceptions raised by the failover controller."""


class FailoverError(Exception):
    """Base error for a run that cannot complete."""


class ForwarderWriteError(FailoverError):
    """The forwarder configuration file could not be written."""


class StateStoreError(FailoverError):
    """The state marker could not be written."""


class RunLockError(FailoverError):
    """The run lock file could not be opened."""
