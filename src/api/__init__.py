"""Document API package."""
