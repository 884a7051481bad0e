"""Command-line interface for namefinder."""
