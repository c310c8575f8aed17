#!/usr/bin/env python3

import dataclasses
import shlex
from camgridlib.core import utils
from camgridlib.core import models

DEFAULT_GLOBAL_FLAGS = ('-y', '-v', 'warning', '-nostats', '-max_error_rate', '1.0')

#============================================

@dataclasses.dataclass(frozen=True)
class EncoderSettings():
	binary: str = 'ffmpeg'
	global_flags: tuple = DEFAULT_GLOBAL_FLAGS
	video_codec: str = 'h264'
	quality: int = 2
	pixel_format: str = 'yuv420p'
	# keyframe interval in seconds of output
	gop_seconds: int = 10
	output_prefix: str = 'multiplewebcams-'
	extension: str = 'mp4'

#============================================

class CommandAssembler():
	"""
	Wrap compiled filter graphs into ffmpeg invocations.

	Nothing is executed here; the caller runs each argv and collects
	the output files in order.
	"""
	def __init__(self, canvas: models.CanvasLayout, settings: EncoderSettings = None):
		self.canvas = canvas
		self.settings = settings if settings is not None else EncoderSettings()

	#============================
	def output_args(self) -> list:
		fps = self.canvas.fps
		return [
			'-an',
			'-codec', self.settings.video_codec,
			'-q:v', str(self.settings.quality),
			'-g', str(fps * self.settings.gop_seconds),
			'-pix_fmt', self.settings.pixel_format,
			'-r', str(fps),
		]

	#============================
	def output_path(self, index: int) -> str:
		return f"{self.settings.output_prefix}part{index}.{self.settings.extension}"

	#============================
	def build_argv(self, graph_text: str, output_file: str) -> tuple:
		argv = [self.settings.binary]
		argv.extend(self.settings.global_flags)
		argv.extend(['-filter_complex', graph_text])
		argv.extend(self.output_args())
		argv.append(output_file)
		return tuple(argv)

	#============================
	def assemble(self, compiled: list) -> list:
		"""
		Args:
			compiled: ordered (Segment, filter graph text) pairs.

		Returns:
			list: SegmentCommand records in segment order.
		"""
		commands = []
		for segment, graph_text in compiled:
			if segment.duration_ms <= 0:
				utils.log(f"skipping 0-length segment at {segment.start_ms}ms")
				continue
			index = len(commands)
			output_file = self.output_path(index)
			argv = self.build_argv(graph_text, output_file)
			commands.append(models.SegmentCommand(index, segment.start_ms,
				segment.end_ms, argv, output_file, graph_text))
		return commands

#============================================

def command_text(command: models.SegmentCommand) -> str:
	return shlex.join(command.argv)
