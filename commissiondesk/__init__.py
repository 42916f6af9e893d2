"""Commission Desk - dealership sales and commission tracking."""

__version__ = "1.0.0"
