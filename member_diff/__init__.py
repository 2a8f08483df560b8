"""Compare the members of two Slack channels."""

__version__ = '1.0.0'
