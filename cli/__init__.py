"""Command-line tools for fetching and charting sensor history."""
