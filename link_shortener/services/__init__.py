"""Link shortener business logic services."""
