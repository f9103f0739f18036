#!/usr/bin/env python
"""
Gesture Canvas - Main Entry Point
=================================
Run the gesture-based drawing application.
Settings from a .env file are loaded by main().
"""

from gesture_canvas.ui import main

if __name__ == "__main__":
    main()
