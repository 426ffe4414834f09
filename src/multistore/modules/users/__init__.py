"""Users module - platform accounts."""
