"""Bundled image resources."""
