"""Service center management backend."""
