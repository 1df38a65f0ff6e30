"""Location fixes and magnetic declination."""
