"""
Reproductor - Self-hosted audio library.

A single FastAPI service that accepts audio uploads, keeps one SQLite row
per track and the audio itself in a local uploads directory, and serves
both back to a small browser player.
"""
