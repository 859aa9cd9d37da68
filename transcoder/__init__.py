"""
Transcoder: drives an external FFmpeg process to convert video files.

The package is organised in layers:

- ``config``: static settings and the optional ``config.user.yaml`` overrides.
- ``domain``: conversion options, job records, progress events and exceptions.
- ``services``: the command builder, progress parser, cancellation channel,
  job supervisor and the request surface used by callers.
- ``utils``: locating (and updating) the FFmpeg executable, formatting helpers.
"""
