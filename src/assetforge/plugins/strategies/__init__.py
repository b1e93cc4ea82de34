"""Built-in build strategies, discovered by folder scan."""
