"""GitTrackObject status and child handling."""
