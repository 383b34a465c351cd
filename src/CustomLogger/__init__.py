"""Logging setup shared by every RefHarmonizer module."""
