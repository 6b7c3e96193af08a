from bhp_stream.models.requests import ConfigPatch, OffsetUpdate, SimulationStart

__all__ = ["ConfigPatch", "OffsetUpdate", "SimulationStart"]
