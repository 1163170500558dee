"""Cross-cutting concerns: exceptions and logging setup."""
