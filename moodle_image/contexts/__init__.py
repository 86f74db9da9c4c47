"""Bounded contexts of moodle-image."""
