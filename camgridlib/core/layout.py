#!/usr/bin/env python3

import math
from fractions import Fraction
from camgridlib.core import utils
from camgridlib.core import models
from camgridlib.core.errors import DegenerateLayout

FALLBACK_MODES = ('fail', 'single_tile')

#============================================

def aspect_scale(src_width: int, src_height: int, tile_width: int,
	tile_height: int) -> tuple:
	"""
	Fit a source inside a tile keeping its aspect ratio, even dimensions.
	"""
	if src_width <= 0 or src_height <= 0:
		raise RuntimeError("source dimensions must be positive")
	if Fraction(src_width, src_height) > Fraction(tile_width, tile_height):
		# extreme aspect ratios would otherwise round the short side to zero
		height = max(2, utils.nearest_even(Fraction(src_height * tile_width, src_width)))
		return (tile_width, height)
	width = max(2, utils.nearest_even(Fraction(src_width * tile_height, src_height)))
	return (width, tile_height)

#============================================

def pad_offset(width: int, height: int, tile_width: int, tile_height: int) -> tuple:
	pad_x = utils.nearest_even(Fraction(tile_width - width, 2))
	pad_y = utils.nearest_even(Fraction(tile_height - height, 2))
	return (pad_x, pad_y)

#============================================

def candidate_grids(source_count: int, canvas: models.CanvasLayout) -> list:
	"""
	Every grid with 1..source_count rows and positive even tile sizes.
	"""
	grids = []
	for tiles_v in range(1, source_count + 1):
		tiles_h = math.ceil(source_count / tiles_v)
		tile_width = utils.floor_even(Fraction(canvas.width, tiles_h))
		tile_height = utils.floor_even(Fraction(canvas.height, tiles_v))
		if tile_width <= 0 or tile_height <= 0:
			continue
		grids.append(models.GridConfiguration(tiles_h, tiles_v, tile_width,
			tile_height))
	return grids

#============================================

def total_scaled_area(sources: list, grid: models.GridConfiguration) -> int:
	area = 0
	for source in sources:
		(width, height) = aspect_scale(source.width, source.height,
			grid.tile_width, grid.tile_height)
		area += width * height
	return area

#============================================

def choose_grid(sources: list, canvas: models.CanvasLayout) -> tuple:
	"""
	Pick the grid showing the most video pixels.

	Ties go to the smallest (tiles_v, tiles_h) pair.

	Returns:
		tuple: (GridConfiguration, total scaled area)
	"""
	best = None
	best_area = -1
	# candidates arrive in ascending tiles_v order, strict > keeps the tie rule
	for grid in candidate_grids(len(sources), canvas):
		area = total_scaled_area(sources, grid)
		if best is None or area > best_area:
			best = grid
			best_area = area
	if best is None:
		raise DegenerateLayout(
			f"canvas {canvas.width}x{canvas.height} is too small for "
			f"{len(sources)} sources",
			source_count=len(sources),
		)
	return (best, best_area)

#============================================

def place_tiles(segment: models.Segment, sources_by_id: dict,
	grid: models.GridConfiguration) -> tuple:
	"""
	Assign row-major tiles and return (segment, SegmentLayout).
	"""
	placements = []
	tiles = []
	total_area = 0
	for index, placement in enumerate(segment.placements):
		source = sources_by_id[placement.source_id]
		row = index // grid.tiles_h
		column = index % grid.tiles_h
		(width, height) = aspect_scale(source.width, source.height,
			grid.tile_width, grid.tile_height)
		(pad_x, pad_y) = pad_offset(width, height, grid.tile_width,
			grid.tile_height)
		placements.append(placement.with_tile(row, column))
		tiles.append(models.TileLayout(source.source_id, row, column, width,
			height, pad_x, pad_y))
		total_area += width * height
	placed = models.Segment(segment.start_ms, segment.end_ms, tuple(placements))
	return (placed, models.SegmentLayout(grid, tuple(tiles), total_area))

#============================================

def layout_segment(segment: models.Segment, sources_by_id: dict,
	canvas: models.CanvasLayout, fallback: str = 'fail') -> tuple:
	"""
	Choose the grid for one segment and assign each placement a tile.

	Args:
		segment: Segment from the reconciler.
		sources_by_id: Source records keyed by source_id.
		canvas: output geometry.
		fallback: 'fail' re-raises DegenerateLayout, 'single_tile' keeps
			only the first source on a single full-canvas tile.

	Returns:
		tuple: (Segment with tiles assigned, SegmentLayout)
	"""
	if fallback not in FALLBACK_MODES:
		raise RuntimeError(f"unknown layout fallback: {fallback}")
	if len(segment.placements) == 0:
		return (segment, models.SegmentLayout(None))
	sources = [sources_by_id[placement.source_id]
		for placement in segment.placements]
	try:
		(grid, _area) = choose_grid(sources, canvas)
	except DegenerateLayout:
		if fallback == 'fail':
			raise
		utils.log(f"degenerate layout at {segment.start_ms}ms, "
			"falling back to a single tile")
		grid = models.GridConfiguration(1, 1, utils.floor_even(canvas.width),
			utils.floor_even(canvas.height))
		segment = models.Segment(segment.start_ms, segment.end_ms,
			segment.placements[:1])
	utils.log(f"segment {segment.start_ms}ms: tiling {len(segment.placements)} "
		f"videos in a {grid.tiles_h}x{grid.tiles_v} grid")
	return place_tiles(segment, sources_by_id, grid)
