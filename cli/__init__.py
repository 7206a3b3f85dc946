"""nativelib command line interface."""
