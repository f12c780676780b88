"""Domain layer - object model, wire shapes and codecs."""
