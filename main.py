#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

Drop sample images into ``images/`` and run:

    python main.py run

Or use the full CLI:

    python -m pixel_markov.cli train --help
    python -m pixel_markov.cli generate output/model.json
"""

from pixel_markov.cli import app

if __name__ == "__main__":
    app()
