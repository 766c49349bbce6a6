"""Pull request reviewer assignment: domain model, ports and a WSGI HTTP layer."""

__version__ = "1.0.0"