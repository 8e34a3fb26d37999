"""Building blocks for a property-management web platform."""

__version__ = "0.1.0"