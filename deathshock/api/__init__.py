"""Bridge HTTP/WebSocket surface for the game-side mod."""
