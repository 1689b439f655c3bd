"""Command line entry points for the Pixie recommender."""
