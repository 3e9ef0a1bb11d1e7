"""Case notification service: fan-out, storage and realtime delivery."""
