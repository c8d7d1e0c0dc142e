"""Read and convert Ratchet & Clank PS2 data: 2FIP/BMP textures, tables of contents, racpak archives, collision and memory maps."""

__version__ = "0.1.0"