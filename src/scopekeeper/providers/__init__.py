"""Provider implementations of the domain resource ports."""
