"""Run a shell or command with temporary AWS credentials for a profile."""

__version__ = "0.1.0"
