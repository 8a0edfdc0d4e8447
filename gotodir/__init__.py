"""Directory shortcuts with usage-ranked fallback."""
