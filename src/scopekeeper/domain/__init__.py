"""Domain layer: value objects, tag conventions and validation rules."""
