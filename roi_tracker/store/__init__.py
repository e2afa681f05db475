"""Store contract (base.py) and the in-process reference implementation (memory.py)."""
