"""Infrastructure: authority HTTP client, credential decoding, cache."""
