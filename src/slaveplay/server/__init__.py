"""HTTP control surface for a supervised player."""
