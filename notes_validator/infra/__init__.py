"""Runtime infrastructure: env toggles and outbound call control."""
