"""Blue/green verification and promotion of Lambda function versions."""

__version__ = "0.3.0"
