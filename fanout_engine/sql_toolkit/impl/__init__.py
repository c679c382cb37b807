"""Concrete SQL toolkit backends."""
