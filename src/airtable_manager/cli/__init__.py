"""Airtable Manager command-line interface."""
