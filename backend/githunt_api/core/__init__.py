"""Core layer: configuration, logging, errors, entities and the event bus."""
