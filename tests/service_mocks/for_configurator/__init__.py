"""Services registered imperatively by a configurator."""
