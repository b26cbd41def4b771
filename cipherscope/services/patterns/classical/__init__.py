"""Classical cipher patterns with fixed decode rules."""
