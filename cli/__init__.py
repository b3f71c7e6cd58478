"""Speed reader command-line interface."""
