"""Academia - Enrollment and pricing engine for school administration."""

__version__ = "0.1.0"
