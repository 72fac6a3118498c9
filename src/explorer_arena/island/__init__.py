"""World/map provider exports."""

from .costs import CostPolicy, CrewScaledCosts, FlatCosts
from .grid import Coordinate, Direction, GridIsland, Tile, island_from_dict, load_island

__all__ = [
    "Coordinate",
    "Direction",
    "GridIsland",
    "Tile",
    "island_from_dict",
    "load_island",
    "CostPolicy",
    "CrewScaledCosts",
    "FlatCosts",
]
