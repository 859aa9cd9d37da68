"""
Configuration Package for the Transcoder.

Static settings live here so that encoding behavior can be adjusted without
touching the services. ``common`` holds application-wide settings (logging,
job states, tool locations from ``config.user.yaml``); ``video`` holds the
encoding parameters used when building FFmpeg command lines.
"""
