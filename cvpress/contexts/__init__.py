"""Bounded contexts of the cvpress pipeline: intake, templating, rendering."""
