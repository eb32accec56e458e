"""Domain layer: value objects, dotted-path helpers, settings, and errors."""
