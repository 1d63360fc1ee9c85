"""Save and restore editor layouts per project and branch."""

__version__ = "0.1.0"
