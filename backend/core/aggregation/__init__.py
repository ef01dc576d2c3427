"""Response aggregation and cache-key derivation."""
