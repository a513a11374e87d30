"""Core package — settings, exceptions, logging."""
