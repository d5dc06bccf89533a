"""Blueprint-driven Discord server provisioning."""

__version__ = "0.1.0"
