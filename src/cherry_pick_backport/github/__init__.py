"""GitHub API access for the backport action."""
