"""Runtime, configuration and the file-backed services it provides."""
