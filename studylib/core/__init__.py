"""Application logic layer."""
