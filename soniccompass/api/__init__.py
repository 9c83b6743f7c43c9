"""HTTP surface: REST routes, WebSocket progress and middleware."""
