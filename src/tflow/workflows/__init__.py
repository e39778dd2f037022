"""Bundled workflow configuration files (TasselPipeline XML)."""
