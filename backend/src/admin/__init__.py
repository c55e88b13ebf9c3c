"""Admin module - platform administration: locations, organizer applications, moderation."""
