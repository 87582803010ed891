"""
Entry-point.  Keeps top-level script tiny.
"""
from scanradar import gui

if __name__ == "__main__":
    gui.main()
