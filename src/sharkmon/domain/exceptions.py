class SharkmonError(Exception):
    """Base class for all gateway errors."""


class ConfigError(SharkmonError):
    """The configuration cannot work, retrying will not help (e.g. a malformed meter endpoint)."""


class ConnectError(SharkmonError):
    """The meter could not be reached."""


class TransportError(SharkmonError):
    """A register read failed on an established session. The session must be dropped."""
