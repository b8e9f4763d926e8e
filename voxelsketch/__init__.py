"""Game logic for a peer-to-peer voxel sketching game: wire messages, players, canvas and scene."""

__version__ = "0.1.0"