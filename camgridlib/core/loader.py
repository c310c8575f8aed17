#!/usr/bin/env python3

import os
import yaml
from camgridlib.core import utils
from camgridlib.core import models
from camgridlib.core.commands import EncoderSettings
from camgridlib.core.filtergraph import GraphSettings
from camgridlib.core.layout import FALLBACK_MODES

#============================================

class ProjectData():
	def __init__(self):
		self.yaml_file = None
		self.output_override = None
		self.dry_run = False
		self.workers = 1
		self.data = {}
		self.canvas = None
		self.timeline = {}
		self.sources = []
		self.encoder = None
		self.graph = None
		self.layout_fallback = 'fail'

#============================================

class ProjectLoader():
	def __init__(self, yaml_file: str, output_override: str = None,
		dry_run: bool = False, workers: int = 1):
		self.yaml_file = yaml_file
		self.output_override = output_override
		self.dry_run = dry_run
		self.workers = workers

	#============================
	def load(self) -> ProjectData:
		project = ProjectData()
		project.yaml_file = self.yaml_file
		project.output_override = self.output_override
		project.dry_run = self.dry_run
		workers = utils.parse_int(self.workers, "workers")
		if workers < 1:
			raise RuntimeError("workers must be at least 1")
		project.workers = workers
		project.data = self._load_yaml()
		self._validate_required_keys(project.data)
		project.canvas = self._parse_canvas(project.data.get('canvas', {}))
		project.timeline = self._parse_timeline(project.data.get('timeline', {}))
		project.sources = self._parse_sources(project.data.get('sources'))
		encoder = project.data.get('encoder', {})
		if encoder is None:
			encoder = {}
		if not isinstance(encoder, dict):
			raise RuntimeError("encoder must be a mapping")
		output = project.data.get('output', {})
		if output is None:
			output = {}
		if not isinstance(output, dict):
			raise RuntimeError("output must be a mapping")
		project.encoder = self._parse_encoder(encoder, output)
		project.graph = self._parse_graph_settings(encoder)
		project.layout_fallback = self._parse_fallback(encoder)
		return project

	#============================
	def _load_yaml(self) -> dict:
		file_size = os.path.getsize(self.yaml_file)
		if file_size > 10 ** 7:
			raise RuntimeError("yaml file is larger than 10MB")
		with open(self.yaml_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("camgrid yaml must be a mapping at the top level")
		return data

	#============================
	def _validate_required_keys(self, data: dict) -> None:
		if data.get('camgrid') != 1:
			raise RuntimeError("camgrid must be set to 1")
		required_keys = ('canvas', 'sources')
		for key in required_keys:
			if key not in data:
				raise RuntimeError(f"missing required key: {key}")

	#============================
	def _parse_canvas(self, canvas: dict) -> models.CanvasLayout:
		if not isinstance(canvas, dict):
			raise RuntimeError("canvas must be a mapping")
		(width, height) = utils.parse_resolution(canvas.get('resolution', [1920, 1080]),
			'canvas.resolution')
		fps = canvas.get('fps', 24)
		if not isinstance(fps, int) or isinstance(fps, bool):
			raise RuntimeError("canvas.fps must be an integer")
		background = str(canvas.get('background', 'white'))
		name = str(canvas.get('name', 'webcam'))
		return models.CanvasLayout(width, height, fps, background, name)

	#============================
	def _parse_timeline(self, timeline: dict) -> dict:
		if timeline is None:
			timeline = {}
		if not isinstance(timeline, dict):
			raise RuntimeError("timeline must be a mapping")
		start_ms = utils.parse_milliseconds(timeline.get('start', 0))
		end_ms = None
		if timeline.get('end') is not None:
			end_ms = utils.parse_milliseconds(timeline.get('end'))
		return {
			'start': start_ms,
			'end': end_ms,
		}

	#============================
	def _parse_sources(self, sources: dict) -> list:
		if not isinstance(sources, dict) or len(sources) == 0:
			raise RuntimeError("sources must be a non-empty mapping")
		parsed = []
		for source_id, entry in sources.items():
			parsed.append(self._parse_source(str(source_id), entry))
		return parsed

	#============================
	def _parse_source(self, source_id: str, entry: dict) -> models.Source:
		if not isinstance(entry, dict):
			raise RuntimeError(f"sources.{source_id} must be a mapping")
		source_file = entry.get('file')
		if source_file is None:
			raise RuntimeError(f"sources.{source_id} missing file")
		(width, height) = utils.parse_resolution(entry.get('resolution'),
			f"sources.{source_id}.resolution")
		# encoders need even dimensions
		width = width - (width % 2)
		height = height - (height % 2)
		if width <= 0 or height <= 0:
			raise RuntimeError(f"sources.{source_id}.resolution is too small")
		codec = str(entry.get('codec', ''))
		duration_ms = None
		if entry.get('duration') is not None:
			duration_ms = utils.parse_milliseconds(entry.get('duration'))
		raw_intervals = entry.get('intervals', [])
		if raw_intervals is None:
			raw_intervals = []
		if not isinstance(raw_intervals, list):
			raise RuntimeError(f"sources.{source_id}.intervals must be a list")
		intervals = tuple(
			self._parse_interval(source_id, raw_interval)
			for raw_interval in raw_intervals
		)
		return models.Source(source_id, str(source_file), width, height, codec,
			intervals, duration_ms)

	#============================
	def _parse_interval(self, source_id: str, raw_interval) -> models.PresenceInterval:
		if isinstance(raw_interval, dict):
			begin = raw_interval.get('begin')
			duration = raw_interval.get('duration')
		elif isinstance(raw_interval, (list, tuple)) and len(raw_interval) == 2:
			(begin, duration) = raw_interval
		else:
			raise RuntimeError(
				f"sources.{source_id}.intervals entries must be [begin, duration]"
			)
		if begin is None or duration is None:
			raise RuntimeError(
				f"sources.{source_id}.intervals entries need begin and duration"
			)
		return models.PresenceInterval(utils.parse_milliseconds(begin),
			utils.parse_milliseconds(duration))

	#============================
	def _parse_encoder(self, encoder: dict, output: dict) -> EncoderSettings:
		defaults = EncoderSettings()
		prefix = output.get('prefix', defaults.output_prefix)
		if self.output_override is not None:
			prefix = self.output_override
		flags = encoder.get('flags', list(defaults.global_flags))
		if not isinstance(flags, list):
			raise RuntimeError("encoder.flags must be a list")
		return EncoderSettings(
			binary=str(encoder.get('binary', defaults.binary)),
			global_flags=tuple(str(flag) for flag in flags),
			video_codec=str(encoder.get('video_codec', defaults.video_codec)),
			quality=utils.parse_int(encoder.get('quality', defaults.quality),
				'encoder.quality'),
			pixel_format=str(encoder.get('pixel_format', defaults.pixel_format)),
			gop_seconds=utils.parse_int(encoder.get('gop_seconds', defaults.gop_seconds),
				'encoder.gop_seconds'),
			output_prefix=str(prefix),
			extension=str(output.get('extension', defaults.extension)).lstrip('.'),
		)

	#============================
	def _parse_graph_settings(self, encoder: dict) -> GraphSettings:
		defaults = GraphSettings()
		preroll_ms = utils.parse_milliseconds(encoder.get('preroll', defaults.preroll_ms))
		if preroll_ms < 0:
			raise RuntimeError("encoder.preroll must not be negative")
		no_seek = encoder.get('no_seek_codecs', list(defaults.no_seek_codecs))
		if not isinstance(no_seek, list):
			raise RuntimeError("encoder.no_seek_codecs must be a list")
		return GraphSettings(preroll_ms, tuple(str(codec) for codec in no_seek))

	#============================
	def _parse_fallback(self, encoder: dict) -> str:
		fallback = str(encoder.get('layout_fallback', 'fail'))
		if fallback not in FALLBACK_MODES:
			raise RuntimeError(
				f"encoder.layout_fallback must be one of {', '.join(FALLBACK_MODES)}"
			)
		return fallback
