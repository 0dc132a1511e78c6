"""Small helpers shared across footflow: label parsing, slicing, logging."""
