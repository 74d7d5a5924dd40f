"""Interactive terminal client for the Vecinita agent gateway."""
