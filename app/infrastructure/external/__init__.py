"""External collaborators: data API, auth, storage, geocoding, email, payments."""
