#!/usr/bin/env python3

import concurrent.futures
import dataclasses
from camgridlib.core import utils
from camgridlib.core import events
from camgridlib.core import layout
from camgridlib.core import timeline
from camgridlib.core import filtergraph
from camgridlib.core.commands import CommandAssembler

#============================================

@dataclasses.dataclass(frozen=True)
class CompositePlan():
	segments: tuple
	layouts: tuple
	commands: tuple

#============================================

class CompositePlanner():
	"""
	Run sources through events, segments, layouts, graphs and commands.
	"""
	def __init__(self, project):
		self.project = project
		self.sources_by_id = {}
		for source in project.sources:
			self.sources_by_id.setdefault(source.source_id, source)

	#============================
	def build_segments(self) -> list:
		timeline_events = events.build_events(self.project.sources)
		return timeline.reconcile(timeline_events, self.project.sources,
			self.project.timeline['start'], self.project.timeline['end'])

	#============================
	def compile_segment(self, segment) -> tuple:
		(placed, segment_layout) = layout.layout_segment(segment,
			self.sources_by_id, self.project.canvas, self.project.layout_fallback)
		graph = filtergraph.compile_segment(placed, segment_layout,
			self.sources_by_id, self.project.canvas, self.project.graph)
		return (placed, segment_layout, filtergraph.render_graph(graph))

	#============================
	def plan(self) -> CompositePlan:
		segments = self.build_segments()
		workers = getattr(self.project, 'workers', 1)
		if workers > 1:
			with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as pool:
				compiled = list(pool.map(self.compile_segment, segments))
		else:
			compiled = [self.compile_segment(segment) for segment in segments]
		assembler = CommandAssembler(self.project.canvas, self.project.encoder)
		commands = assembler.assemble(
			[(placed, graph_text) for (placed, _layout, graph_text) in compiled]
		)
		utils.log(f"planned {len(commands)} segment commands")
		return CompositePlan(
			tuple(placed for (placed, _layout, _text) in compiled),
			tuple(segment_layout for (_placed, segment_layout, _text) in compiled),
			tuple(commands),
		)
