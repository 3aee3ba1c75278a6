"""Static enumerations shared across layers."""
