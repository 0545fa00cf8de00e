"""Arrays, slices, maps and iteration."""
