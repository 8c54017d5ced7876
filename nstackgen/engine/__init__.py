"""nstackgen engine — configuration, errors, build logging, resolver transport."""
