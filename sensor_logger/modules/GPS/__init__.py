"""GPS module for recording location fixes alongside other sensor streams.

This module provides:
- Primary/secondary location provider subscription with fallback ordering
- Reading normalization stamped from a boot-relative clock
- CSV output to a direct path or a permission-scoped URI

Main components:
- gps_core: Pipeline components (providers, normalizer, sinks, session)
- config: Typed module configuration
- recorder: GPSRecorder facade tying the pieces together
"""
