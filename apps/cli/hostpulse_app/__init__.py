"""hostpulse command-line application."""
