"""Utility functions and helpers for the membership service."""
