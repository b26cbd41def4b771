"""Base-N, web, unicode and legacy encodings."""
