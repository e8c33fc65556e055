"""Launch the Tocho Prime web console with ``python app.py``.

The command line interface stays available through ``python -m tocho``.
"""

from tocho.web import main as run_web


if __name__ == "__main__":
    run_web()
