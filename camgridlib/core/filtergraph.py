#!/usr/bin/env python3

"""
Per-segment ffmpeg filter graph.

compile_segment() builds a FilterGraph out of plain node records from a
segment and its layout; render_graph() is the only place that knows the
ffmpeg filter syntax.
"""

import dataclasses
from typing import Optional
from camgridlib.core import utils
from camgridlib.core import models

DEFAULT_PREROLL_MS = 10000
DEFAULT_NO_SEEK_CODECS = ('flashsv2',)

#============================================

@dataclasses.dataclass(frozen=True)
class GraphSettings():
	# decode this long before the in-point so a keyframe is available
	preroll_ms: int = DEFAULT_PREROLL_MS
	# codecs without regular keyframes are always decoded from the start
	no_seek_codecs: tuple = DEFAULT_NO_SEEK_CODECS

#============================================
# graph nodes
#============================================

@dataclasses.dataclass(frozen=True)
class MovieSource():
	file: str
	seek_ms: int

@dataclasses.dataclass(frozen=True)
class FrameRate():
	fps: int
	start_ms: int

@dataclasses.dataclass(frozen=True)
class ResetTimestamps():
	pass

@dataclasses.dataclass(frozen=True)
class Scale():
	width: int
	height: int

@dataclasses.dataclass(frozen=True)
class SquarePixels():
	pass

@dataclasses.dataclass(frozen=True)
class Pad():
	width: int
	height: int
	color: str
	x: Optional[int] = None
	y: Optional[int] = None

@dataclasses.dataclass(frozen=True)
class ColorSource():
	color: str
	width: int
	height: int
	fps: int

@dataclasses.dataclass(frozen=True)
class Concat():
	count: int

@dataclasses.dataclass(frozen=True)
class HStack():
	count: int

@dataclasses.dataclass(frozen=True)
class VStack():
	count: int

@dataclasses.dataclass(frozen=True)
class Overlay():
	x: int
	y: int

@dataclasses.dataclass(frozen=True)
class Trim():
	end_ms: int

#============================================

@dataclasses.dataclass(frozen=True)
class Chain():
	inputs: tuple
	nodes: tuple
	output: Optional[str] = None

#============================================

@dataclasses.dataclass(frozen=True)
class FilterGraph():
	chains: tuple

	def labels(self) -> list:
		return [chain.output for chain in self.chains if chain.output is not None]

	def nodes_of(self, node_type) -> list:
		found = []
		for chain in self.chains:
			for node in chain.nodes:
				if isinstance(node, node_type):
					found.append(node)
		return found

#============================================

def seek_point(offset_ms: int, codec: str, settings: GraphSettings = None) -> int:
	"""
	Where decoding starts for a source that is offset_ms into its presence.
	"""
	if settings is None:
		settings = GraphSettings()
	no_seek = [value.lower() for value in settings.no_seek_codecs]
	if codec is not None and codec.lower() in no_seek:
		return 0
	return max(offset_ms - settings.preroll_ms, 0)

#============================================

def needs_filler(source: models.Source, offset_ms: int, duration_ms: int) -> bool:
	if source.duration_ms is None:
		return True
	return source.duration_ms - offset_ms < duration_ms

#============================================

def tile_label(name: str, column: int, row: int) -> str:
	return f"{name}_x{column}_y{row}"

#============================================

def compile_segment(segment: models.Segment, layout: models.SegmentLayout,
	sources_by_id: dict, canvas: models.CanvasLayout,
	settings: GraphSettings = None) -> FilterGraph:
	"""
	Build the node graph realizing a segment layout on the canvas.

	Args:
		segment: Segment with tiles assigned.
		layout: SegmentLayout from the optimizer.
		sources_by_id: Source records keyed by source_id.
		canvas: output geometry and fill colour.
		settings: seek behaviour.

	Returns:
		FilterGraph: chains in evaluation order.
	"""
	if settings is None:
		settings = GraphSettings()
	name = canvas.name
	color = canvas.background
	duration_ms = segment.duration_ms
	background = ColorSource(color, canvas.width, canvas.height, canvas.fps)
	if layout.is_empty:
		return FilterGraph((Chain((), (background, Trim(duration_ms))),))
	grid = layout.grid
	placements = {placement.source_id: placement for placement in segment.placements}
	chains = [Chain((), (background,), f"{name}_in")]
	for tile in layout.tiles:
		placement = placements[tile.source_id]
		source = sources_by_id[tile.source_id]
		label = tile_label(name, tile.column, tile.row)
		seek_ms = seek_point(placement.offset_ms, source.codec, settings)
		nodes = (
			MovieSource(source.file, seek_ms),
			FrameRate(canvas.fps, placement.offset_ms),
			ResetTimestamps(),
			Scale(tile.width, tile.height),
			SquarePixels(),
			Pad(grid.tile_width, grid.tile_height, color, tile.pad_x, tile.pad_y),
		)
		if not needs_filler(source, placement.offset_ms, duration_ms):
			chains.append(Chain((), nodes, label))
			continue
		chains.append(Chain((), nodes, f"{label}_movie"))
		filler = ColorSource(color, grid.tile_width, grid.tile_height, canvas.fps)
		chains.append(Chain((), (filler,), f"{label}_pad"))
		chains.append(Chain((f"{label}_movie", f"{label}_pad"), (Concat(2),), label))
	row_labels = []
	for row_tiles in layout.rows():
		row = row_tiles[0].row
		inputs = tuple(tile_label(name, tile.column, row) for tile in row_tiles)
		nodes = []
		if len(inputs) > 1:
			nodes.append(HStack(len(inputs)))
		nodes.append(Pad(canvas.width, grid.tile_height, color))
		row_label = f"{name}_y{row}"
		chains.append(Chain(inputs, tuple(nodes), row_label))
		row_labels.append(row_label)
	nodes = []
	if len(row_labels) > 1:
		nodes.append(VStack(len(row_labels)))
	nodes.append(Pad(canvas.width, canvas.height, color))
	chains.append(Chain(tuple(row_labels), tuple(nodes), name))
	chains.append(Chain((f"{name}_in", name), (Overlay(0, 0), Trim(duration_ms))))
	return FilterGraph(tuple(chains))

#============================================
# serializer
#============================================

def escape_option_value(value: str) -> str:
	escaped = ''
	for char in value:
		if char in "\\':":
			escaped += '\\'
		escaped += char
	return escaped

#============================================

def escape_graph_text(value: str) -> str:
	escaped = ''
	for char in value:
		if char in "\\'[],;":
			escaped += '\\'
		escaped += char
	return escaped

#============================================

def render_node(node) -> str:
	seconds = utils.ms_to_seconds
	if isinstance(node, MovieSource):
		filename = escape_graph_text(escape_option_value(node.file))
		return f"movie={filename}:sp={seconds(node.seek_ms)}"
	if isinstance(node, FrameRate):
		return f"fps={node.fps}:start_time={seconds(node.start_ms)}"
	if isinstance(node, ResetTimestamps):
		return "setpts=PTS-STARTPTS"
	if isinstance(node, Scale):
		return f"scale={node.width}:{node.height}"
	if isinstance(node, SquarePixels):
		return "setsar=1"
	if isinstance(node, Pad):
		text = f"pad=w={node.width}:h={node.height}"
		if node.x is not None and node.y is not None:
			text += f":x={node.x}:y={node.y}"
		return text + f":color={node.color}"
	if isinstance(node, ColorSource):
		return f"color=c={node.color}:s={node.width}x{node.height}:r={node.fps}"
	if isinstance(node, Concat):
		return f"concat=n={node.count}:v=1:a=0"
	if isinstance(node, HStack):
		return f"hstack=inputs={node.count}"
	if isinstance(node, VStack):
		return f"vstack=inputs={node.count}"
	if isinstance(node, Overlay):
		return f"overlay=x={node.x}:y={node.y}"
	if isinstance(node, Trim):
		return f"trim=end={seconds(node.end_ms)}"
	raise RuntimeError(f"unsupported filter node {type(node).__name__}")

#============================================

def render_chain(chain: Chain) -> str:
	text = ''.join(f"[{label}]" for label in chain.inputs)
	text += ','.join(render_node(node) for node in chain.nodes)
	if chain.output is not None:
		text += f"[{chain.output}]"
	return text

#============================================

def render_graph(graph: FilterGraph) -> str:
	return ';'.join(render_chain(chain) for chain in graph.chains)
