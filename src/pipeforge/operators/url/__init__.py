"""URL operators."""
