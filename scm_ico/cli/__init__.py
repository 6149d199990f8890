"""Command line driver for the SCM ICO."""
