"""Access log read module."""
