"""Administrative command registry."""
