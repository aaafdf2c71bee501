"""Transport-agnostic core: operation descriptors, registry, dispatch pipeline, errors."""
