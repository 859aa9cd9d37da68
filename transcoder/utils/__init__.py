"""
Utilities Package for the Transcoder.

Modules:
    - module_updater.py: Locates, updates and verifies the FFmpeg executables.
    - format_utils.py: Helpers for turning durations, sizes and progress into
      human-readable strings for log messages.
"""
