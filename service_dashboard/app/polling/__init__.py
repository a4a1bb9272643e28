"""Background polling of the upstream listing."""
