"""Application layer: graph construction, post-processing, export."""
