"""Building blocks for an MQTT broker: wire codecs, fixed headers, in-flight
message tracking, a client registry and run-time record types."""

__version__ = "0.1.0"

__all__ = ["codec", "fixedheader", "inflight", "clients", "dynstruct", "structreader"]