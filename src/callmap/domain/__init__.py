"""Domain layer: graph model, value objects, ports, exceptions."""
