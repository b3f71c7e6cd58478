"""Speed reader backend: SSRF-safe article fetching and paced word display."""
