"""Post-run exporters."""

from .exporters import Exporter, GameLogExporter, POIsExporter, VisitedMapExporter, read_game_log

__all__ = ["Exporter", "GameLogExporter", "POIsExporter", "VisitedMapExporter", "read_game_log"]
