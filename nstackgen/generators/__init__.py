"""nstackgen generators — naming, escaping, dialects and per-block emitters."""
