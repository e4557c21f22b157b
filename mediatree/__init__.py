"""Browse a flat, key-addressed image store as a directory tree."""
