"""Desktop simulator for WAVEGRID using pygame."""
