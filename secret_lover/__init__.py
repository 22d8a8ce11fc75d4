"""secret-lover: project-scoped secrets in the system keyring."""

__version__ = "0.1.0"
