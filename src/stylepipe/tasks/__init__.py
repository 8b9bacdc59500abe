"""Task modules live here.

Each module declares tasks with `@orchestrator.task(name=..., deps=[...], inputs=...)`
or `orchestrator.alias(...)`; `discover_tasks()` collects them into a TaskRegistry.
Keep shared helpers in their own modules (notify, prefixer, sourcemap).
"""
