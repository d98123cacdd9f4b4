"""Packaged default instructions and reference criteria."""
