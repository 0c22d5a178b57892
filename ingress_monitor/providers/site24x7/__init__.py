"""Site24x7 website monitor provider."""
