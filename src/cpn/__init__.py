"""CPN: cost-per-nut tracking API and client SDK."""

__version__ = "0.1.0"
