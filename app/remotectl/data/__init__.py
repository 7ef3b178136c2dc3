"""Bundled data files for remotectl."""
