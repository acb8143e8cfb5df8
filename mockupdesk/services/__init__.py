"""Use cases of the post approval workflow."""
