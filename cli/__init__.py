"""Command line entry points for nnscope."""
