"""Command-line tools (`dsk-sim`)."""
