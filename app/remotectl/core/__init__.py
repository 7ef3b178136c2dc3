"""Core engine: config store, mount probe, orchestration and boot persistence."""
