#!/usr/bin/env python3

"""
Plain immutable records shared by the planning stages.

Times are integer milliseconds on the combined timeline. Pixel sizes
are integers.
"""

import re
import dataclasses
from typing import Optional

START = 'start'
STOP = 'stop'

#============================================

@dataclasses.dataclass(frozen=True)
class PresenceInterval():
	begin_ms: int
	duration_ms: int

	@property
	def end_ms(self) -> int:
		return self.begin_ms + self.duration_ms

#============================================

@dataclasses.dataclass(frozen=True)
class Source():
	"""
	One input video: file reference, native size, codec tag and the
	intervals during which it is present on the combined timeline.
	"""
	source_id: str
	file: str
	width: int
	height: int
	codec: str = ''
	intervals: tuple = ()
	# known footage length, None when the media was not inspected
	duration_ms: Optional[int] = None

#============================================

@dataclasses.dataclass(frozen=True)
class TimelineEvent():
	timestamp_ms: int
	kind: str
	source_id: str
	# discovery order: (source index, interval index)
	order: tuple = (0, 0)

	@property
	def is_start(self) -> bool:
		return self.kind == START

	def sort_key(self) -> tuple:
		kind_rank = 0 if self.kind == STOP else 1
		return (self.timestamp_ms, kind_rank, self.order)

#============================================

@dataclasses.dataclass(frozen=True)
class Placement():
	source_id: str
	# how far into its current presence the source already is
	offset_ms: int
	row: Optional[int] = None
	column: Optional[int] = None

	def with_tile(self, row: int, column: int) -> 'Placement':
		return dataclasses.replace(self, row=row, column=column)

#============================================

@dataclasses.dataclass(frozen=True)
class Segment():
	"""Half-open interval [start_ms, end_ms) with a constant active set."""
	start_ms: int
	end_ms: int
	placements: tuple = ()

	@property
	def duration_ms(self) -> int:
		return self.end_ms - self.start_ms

	@property
	def source_ids(self) -> tuple:
		return tuple(placement.source_id for placement in self.placements)

#============================================

@dataclasses.dataclass(frozen=True)
class CanvasLayout():
	width: int = 1920
	height: int = 1080
	fps: int = 24
	background: str = 'white'
	name: str = 'webcam'

	def __post_init__(self):
		if self.width <= 0 or self.height <= 0:
			raise RuntimeError("canvas resolution must be positive")
		if self.width % 2 != 0 or self.height % 2 != 0:
			raise RuntimeError("canvas resolution must be even")
		if not isinstance(self.fps, int) or self.fps <= 0:
			raise RuntimeError("canvas fps must be a positive integer")
		# the name becomes part of filter graph labels
		if not isinstance(self.name, str) or not re.fullmatch(r"[A-Za-z0-9_]+", self.name):
			raise RuntimeError(
				f"canvas name must only contain letters, digits and underscores: {self.name!r}"
			)

#============================================

@dataclasses.dataclass(frozen=True)
class GridConfiguration():
	tiles_h: int
	tiles_v: int
	tile_width: int
	tile_height: int

	@property
	def capacity(self) -> int:
		return self.tiles_h * self.tiles_v

#============================================

@dataclasses.dataclass(frozen=True)
class TileLayout():
	source_id: str
	row: int
	column: int
	# scaled video size inside the tile
	width: int
	height: int
	pad_x: int
	pad_y: int

#============================================

@dataclasses.dataclass(frozen=True)
class SegmentLayout():
	grid: Optional[GridConfiguration]
	tiles: tuple = ()
	total_area: int = 0

	@property
	def is_empty(self) -> bool:
		return len(self.tiles) == 0

	def rows(self) -> list:
		"""Tiles grouped by row, row-major, empty rows omitted."""
		grouped = {}
		for tile in self.tiles:
			grouped.setdefault(tile.row, []).append(tile)
		return [sorted(grouped[row], key=lambda tile: tile.column)
			for row in sorted(grouped)]

#============================================

@dataclasses.dataclass(frozen=True)
class SegmentCommand():
	index: int
	start_ms: int
	end_ms: int
	argv: tuple
	output_file: str
	filter_graph: str = ''

	@property
	def duration_ms(self) -> int:
		return self.end_ms - self.start_ms
