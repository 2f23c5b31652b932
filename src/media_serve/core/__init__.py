"""Rendering core: raster images, diagrams, codecs and the content dispatch."""
