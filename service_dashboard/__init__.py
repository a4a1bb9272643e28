"""ModelBoard dashboard service."""
