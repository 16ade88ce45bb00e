"""Exceptions that abort a whole run before any linking starts."""


class BootstrapError(Exception):
    """Required roots, settings or the account list could not be loaded."""
