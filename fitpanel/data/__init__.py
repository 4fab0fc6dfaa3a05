"""Raw table discovery, loading, validation, derivation and the cleaned store."""
