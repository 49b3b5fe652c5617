"""Domain layer: model, reconciliation core, ports and the async driver."""
