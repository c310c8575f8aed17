#!/usr/bin/env python3

"""
Tests for filter graph compilation and rendering.
"""

# Standard Library
import os
import sys
import unittest

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from camgridlib.core import filtergraph
from camgridlib.core import layout
from camgridlib.core import models

#============================================

CANVAS = models.CanvasLayout(1920, 1080, 24, 'white', 'webcam')

#============================================

def _compile(segment: models.Segment, sources: list,
	settings: filtergraph.GraphSettings = None) -> filtergraph.FilterGraph:
	sources_by_id = {source.source_id: source for source in sources}
	(placed, segment_layout) = layout.layout_segment(segment, sources_by_id, CANVAS)
	return filtergraph.compile_segment(placed, segment_layout, sources_by_id,
		CANVAS, settings)

#============================================

class SeekPointTest(unittest.TestCase):
	#============================================
	def test_seeks_ten_seconds_early(self) -> None:
		self.assertEqual(filtergraph.seek_point(25000, 'h264'), 15000)

	#============================================
	def test_seek_clamped_at_zero(self) -> None:
		self.assertEqual(filtergraph.seek_point(4000, 'vp8'), 0)

	#============================================
	def test_denylisted_codec_decodes_from_start(self) -> None:
		self.assertEqual(filtergraph.seek_point(60000, 'flashsv2'), 0)
		self.assertEqual(filtergraph.seek_point(60000, 'FLASHSV2'), 0)

	#============================================
	def test_custom_settings(self) -> None:
		settings = filtergraph.GraphSettings(preroll_ms=2000, no_seek_codecs=('vp8',))
		self.assertEqual(filtergraph.seek_point(5000, 'h264', settings), 3000)
		self.assertEqual(filtergraph.seek_point(5000, 'vp8', settings), 0)

#============================================

class CompileSegmentTest(unittest.TestCase):
	#============================================
	def test_single_source_graph_text(self) -> None:
		source = models.Source('cam1', '/media/cam1.mp4', 640, 480, 'h264',
			(models.PresenceInterval(0, 20000),))
		segment = models.Segment(0, 20000, (models.Placement('cam1', 0),))
		text = filtergraph.render_graph(_compile(segment, [source]))
		expected = ";".join([
			"color=c=white:s=1920x1080:r=24[webcam_in]",
			"movie=/media/cam1.mp4:sp=0.000,fps=24:start_time=0.000,"
			"setpts=PTS-STARTPTS,scale=1440:1080,setsar=1,"
			"pad=w=1920:h=1080:x=240:y=0:color=white[webcam_x0_y0_movie]",
			"color=c=white:s=1920x1080:r=24[webcam_x0_y0_pad]",
			"[webcam_x0_y0_movie][webcam_x0_y0_pad]concat=n=2:v=1:a=0[webcam_x0_y0]",
			"[webcam_x0_y0]pad=w=1920:h=1080:color=white[webcam_y0]",
			"[webcam_y0]pad=w=1920:h=1080:color=white[webcam]",
			"[webcam_in][webcam]overlay=x=0:y=0,trim=end=20.000",
		])
		self.assertEqual(text, expected)

	#============================================
	def test_empty_segment_is_blank_canvas(self) -> None:
		segment = models.Segment(0, 1500, ())
		text = filtergraph.render_graph(_compile(segment, []))
		self.assertEqual(text, "color=c=white:s=1920x1080:r=24,trim=end=1.500")

	#============================================
	def test_seek_and_in_point_use_offset(self) -> None:
		source = models.Source('cam1', '/media/cam1.mp4', 1280, 720, 'h264',
			(models.PresenceInterval(0, 60000),))
		segment = models.Segment(30000, 40000, (models.Placement('cam1', 25000),))
		graph = _compile(segment, [source])
		movie = graph.nodes_of(filtergraph.MovieSource)[0]
		frame_rate = graph.nodes_of(filtergraph.FrameRate)[0]
		self.assertEqual(movie.seek_ms, 15000)
		self.assertEqual(frame_rate.start_ms, 25000)
		self.assertEqual(graph.nodes_of(filtergraph.Trim)[0].end_ms, 10000)

	#============================================
	def test_filler_skipped_when_footage_is_long_enough(self) -> None:
		source = models.Source('cam1', '/media/cam1.mp4', 1280, 720, 'h264',
			(models.PresenceInterval(0, 60000),), duration_ms=60000)
		segment = models.Segment(0, 10000, (models.Placement('cam1', 0),))
		graph = _compile(segment, [source])
		self.assertEqual(graph.nodes_of(filtergraph.Concat), [])
		self.assertIn('webcam_x0_y0', graph.labels())

	#============================================
	def test_filler_added_for_short_footage(self) -> None:
		source = models.Source('cam1', '/media/cam1.mp4', 1280, 720, 'h264',
			(models.PresenceInterval(0, 60000),), duration_ms=55000)
		segment = models.Segment(50000, 60000, (models.Placement('cam1', 50000),))
		graph = _compile(segment, [source])
		self.assertEqual(len(graph.nodes_of(filtergraph.Concat)), 1)
		self.assertIn('webcam_x0_y0_pad', graph.labels())

	#============================================
	def test_three_tiles_rows_and_stacks(self) -> None:
		sources = []
		placements = []
		for index in range(3):
			source_id = f"cam{index}"
			sources.append(models.Source(source_id, f"/media/{source_id}.mp4",
				1920, 1080, 'h264', (models.PresenceInterval(0, 1000),), 1000))
			placements.append(models.Placement(source_id, 0))
		segment = models.Segment(0, 1000, tuple(placements))
		graph = _compile(segment, sources)
		text = filtergraph.render_graph(graph)
		self.assertIn(
			"[webcam_x0_y0][webcam_x1_y0]hstack=inputs=2,"
			"pad=w=1920:h=540:color=white[webcam_y0]", text)
		self.assertIn("[webcam_x0_y1]pad=w=1920:h=540:color=white[webcam_y1]", text)
		self.assertIn(
			"[webcam_y0][webcam_y1]vstack=inputs=2,"
			"pad=w=1920:h=1080:color=white[webcam]", text)
		movies = graph.nodes_of(filtergraph.MovieSource)
		self.assertEqual([movie.file for movie in movies],
			['/media/cam0.mp4', '/media/cam1.mp4', '/media/cam2.mp4'])

#============================================

def test_file_names_are_escaped() -> None:
	"""
	Colons, quotes and graph separators in paths cannot break the graph.
	"""
	node = filtergraph.MovieSource("/media/cam:1,a.mp4", 0)
	assert filtergraph.render_node(node) == "movie=/media/cam\\\\:1\\,a.mp4:sp=0.000"

#============================================

def test_unknown_node_rejected() -> None:
	with pytest.raises(RuntimeError):
		filtergraph.render_node(object())

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
