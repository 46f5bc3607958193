"""Monster Spawner API — FastAPI gateway for the spawn bridge."""
