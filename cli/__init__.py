"""Command line tools for AdaptNets."""
