"""Services: the local store and the notes application controller."""
