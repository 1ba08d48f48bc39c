"""Container-tree helpers: dot-path access and projections."""
