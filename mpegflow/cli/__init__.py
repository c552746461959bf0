"""mpegflow command line entry points."""
