"""Shared CLI context, options and error handling."""
