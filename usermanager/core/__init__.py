"""Core utilities: auth primitives, policy, cache, events, logging."""
