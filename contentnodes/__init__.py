"""Read-side data access for content management nodes."""
