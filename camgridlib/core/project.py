#!/usr/bin/env python3

import yaml
from camgridlib.core import utils
from camgridlib.core.loader import ProjectLoader
from camgridlib.core.planner import CompositePlanner

#============================================

class CamgridProject():
	def __init__(self, yaml_file: str, output_override: str = None,
		dry_run: bool = False, workers: int = 1):
		loader = ProjectLoader(yaml_file, output_override=output_override,
			dry_run=dry_run, workers=workers)
		self._project = loader.load()
		self._planner = CompositePlanner(self._project)
		self._plan = None
		self._sync_public_fields()

	#============================
	def _sync_public_fields(self) -> None:
		self.yaml_file = self._project.yaml_file
		self.output_override = self._project.output_override
		self.dry_run = self._project.dry_run
		self.data = self._project.data
		self.canvas = self._project.canvas
		self.timeline = self._project.timeline
		self.sources = self._project.sources
		self.encoder = self._project.encoder

	#============================
	def plan(self):
		if self._plan is None:
			self._plan = self._planner.plan()
		return self._plan

	#============================
	def validate(self) -> None:
		self.plan()

	#============================
	def run(self) -> list:
		"""
		Plan the composite and print one command per segment.
		"""
		plan = self.plan()
		if self.dry_run:
			utils.log("dry run: validation complete")
			return []
		for command in plan.commands:
			utils.show_cmd(command.argv)
		return list(plan.commands)

	#============================
	def plan_dict(self) -> dict:
		plan = self.plan()
		segments = []
		for segment, segment_layout, command in zip(plan.segments, plan.layouts,
			plan.commands):
			entry = {
				'start': segment.start_ms,
				'end': segment.end_ms,
				'output': command.output_file,
				'grid': None,
				'tiles': [],
			}
			if segment_layout.grid is not None:
				entry['grid'] = [segment_layout.grid.tiles_h, segment_layout.grid.tiles_v]
			for placement, tile in zip(segment.placements, segment_layout.tiles):
				entry['tiles'].append({
					'source': placement.source_id,
					'offset': placement.offset_ms,
					'row': tile.row,
					'column': tile.column,
					'size': [tile.width, tile.height],
					'pad': [tile.pad_x, tile.pad_y],
				})
			entry['filter_complex'] = command.filter_graph
			segments.append(entry)
		return {
			'canvas': {
				'resolution': [self.canvas.width, self.canvas.height],
				'fps': self.canvas.fps,
				'background': self.canvas.background,
			},
			'segments': segments,
		}

	#============================
	def dump_plan(self) -> str:
		return yaml.safe_dump(self.plan_dict(), sort_keys=False)
