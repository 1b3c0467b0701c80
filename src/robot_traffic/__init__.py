"""Fleet traffic simulation: robots, stations and traffic reports."""

__version__ = "0.1.0"
