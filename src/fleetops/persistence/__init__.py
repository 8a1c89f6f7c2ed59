"""Record stores, file registries and disk access."""
