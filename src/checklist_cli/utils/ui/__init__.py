"""Terminal output helpers (rich console and formatters)."""
