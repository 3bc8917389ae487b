"""Small helpers shared across tts-relay."""
