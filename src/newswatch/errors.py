"""Exception types shared across newswatch."""


class ConfigurationError(Exception):
    """A required setting, such as an API key, is missing."""


class StoreError(Exception):
    """A key-value backend failed to complete an operation.

    Only raised by backends. ``NewsStore`` converts it into the documented
    fallback for every operation.
    """
