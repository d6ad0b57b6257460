"""simulation — The world's persistent topology.

Every zone exists here whether or not it is resident; the zone
controller (``scenes/zone_manager.py``) decides which one is live.

Submodules
----------
zone_graph      ZoneGraph, ZoneConfigError — zones, exits, free zones
"""
