"""Media module - presigned direct uploads and asset records."""
