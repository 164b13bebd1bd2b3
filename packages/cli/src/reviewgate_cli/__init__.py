"""reviewgate command-line interface."""
