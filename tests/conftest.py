import os
import sys

# Flat module layout: make the repo root importable when running from a checkout
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Charts are written to files only
os.environ.setdefault("MPLBACKEND", "Agg")
