"""HTTP service exposing pipeline runs."""
