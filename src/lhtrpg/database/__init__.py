"""Document store for actors and their owned items."""
