"""Output sinks for recorded GPS data."""

from .sinks import DirectPathSink, OutputSink, ScopedUriSink, open_output_sink

__all__ = ["DirectPathSink", "OutputSink", "ScopedUriSink", "open_output_sink"]
