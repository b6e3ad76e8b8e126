"""Bundled JSON Schema describing schema definition documents."""
