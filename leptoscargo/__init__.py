"""Resolve Leptos project configuration from cargo metadata, build cargo command lines and run cargo tests."""

__version__ = "0.1.0"