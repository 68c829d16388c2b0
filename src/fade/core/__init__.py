"""Navigation, tagging, preloading and rescan state machine."""
