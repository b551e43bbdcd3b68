"""Shared building blocks: errors, source locations, options and metadata tables."""
