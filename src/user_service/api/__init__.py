"""HTTP surface of the user service."""
