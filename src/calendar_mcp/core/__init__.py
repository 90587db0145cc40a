"""Core gateway plumbing: script runners, output protocol, logging, telemetry."""
