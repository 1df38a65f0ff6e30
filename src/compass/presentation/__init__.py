"""Needle rendering."""
