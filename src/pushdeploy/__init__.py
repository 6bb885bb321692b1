"""Git push-to-deploy hook for static web builds."""

__version__ = "0.1.0"
