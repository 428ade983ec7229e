"""Constants shared across the autoproxy package."""
