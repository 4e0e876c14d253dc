"""HTTP API: browser WebRTC routes and Plivo routes."""
