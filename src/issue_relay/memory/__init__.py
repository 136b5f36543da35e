"""Short- and long-term storage for GitHub issue data."""
