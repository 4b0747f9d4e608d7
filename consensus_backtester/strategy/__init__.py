"""Strategy components: indicator adapters and their combinations."""
