"""Job board backend: job posts, applications with attached CVs, and an admin gate."""

__version__ = "1.0.0"
