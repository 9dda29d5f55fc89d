"""Small helpers shared across Spectacle packages."""
