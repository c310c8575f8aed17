#!/usr/bin/env python3

import dataclasses
from camgridlib.core import utils
from camgridlib.core import models
from camgridlib.core.events import group_events
from camgridlib.core.errors import EmptyTimeline
from camgridlib.core.errors import InvalidInterval
from camgridlib.core.errors import UnresolvedSource

#============================================

@dataclasses.dataclass(frozen=True)
class ActiveEntry():
	source_id: str
	activated_ms: int
	# open presence intervals of this source
	depth: int

#============================================

def apply_event_group(active: tuple, timestamp: int, events: list,
	source_rank: dict) -> tuple:
	"""
	Apply every event at one timestamp at once and return the new active set.

	A source whose open intervals all close at this instant and which
	starts again here is re-activated at this timestamp. Intervals that
	begin and end at this instant cancel out.
	"""
	current = {entry.source_id: entry for entry in active}
	starts = {}
	stops = {}
	touched = []
	for event in events:
		bucket = starts if event.is_start else stops
		bucket.setdefault(event.source_id, set()).add(event.order)
		if event.source_id not in touched:
			touched.append(event.source_id)
	updated = dict(current)
	for source_id in touched:
		start_orders = starts.get(source_id, set())
		stop_orders = stops.get(source_id, set())
		zero_length = len(start_orders & stop_orders)
		opened = len(start_orders) - zero_length
		closed = len(stop_orders) - zero_length
		entry = current.get(source_id)
		depth = entry.depth if entry is not None else 0
		new_depth = depth + opened - closed
		if new_depth <= 0:
			updated.pop(source_id, None)
			continue
		if entry is None or closed >= depth:
			activated_ms = timestamp
		else:
			activated_ms = entry.activated_ms
		updated[source_id] = ActiveEntry(source_id, activated_ms, new_depth)
	ordered = sorted(updated.values(), key=lambda item: source_rank[item.source_id])
	return tuple(ordered)

#============================================

def active_signature(active: tuple) -> tuple:
	# depth changes alone do not start a new segment
	return tuple((entry.source_id, entry.activated_ms) for entry in active)

#============================================

def make_segment(start_ms: int, end_ms: int, active: tuple) -> models.Segment:
	placements = tuple(
		models.Placement(entry.source_id, start_ms - entry.activated_ms)
		for entry in active
	)
	return models.Segment(start_ms, end_ms, placements)

#============================================

def reconcile(events: list, sources: list, timeline_start_ms: int = 0,
	timeline_end_ms: int = None) -> list:
	"""
	Sweep the events into contiguous segments covering
	[timeline_start_ms, timeline_end_ms).

	Args:
		events: TimelineEvent list, any order.
		sources: Source list; its order decides the placement order.
		timeline_start_ms: first instant of the output.
		timeline_end_ms: end of the output, defaults to the last event.

	Returns:
		list: Segment records in ascending time order.
	"""
	source_rank = {}
	for index, source in enumerate(sources):
		source_rank.setdefault(source.source_id, index)
	for event in events:
		if event.source_id not in source_rank:
			raise UnresolvedSource(event.source_id)
	groups = group_events(events)
	if timeline_end_ms is None:
		timeline_end_ms = groups[-1][0] if len(groups) > 0 else timeline_start_ms
	if timeline_start_ms < 0:
		raise InvalidInterval(f"timeline start is negative: {timeline_start_ms}")
	if timeline_end_ms < timeline_start_ms:
		raise InvalidInterval(
			f"timeline end {timeline_end_ms} is before start {timeline_start_ms}"
		)
	segments = []
	active = ()
	boundary = timeline_start_ms
	for timestamp, group in groups:
		updated = apply_event_group(active, timestamp, group, source_rank)
		if active_signature(updated) == active_signature(active):
			active = updated
			continue
		end_ms = min(timestamp, timeline_end_ms)
		if end_ms > boundary:
			segments.append(make_segment(boundary, end_ms, active))
		active = updated
		boundary = max(boundary, end_ms)
	if timeline_end_ms > boundary:
		segments.append(make_segment(boundary, timeline_end_ms, active))
	if len(segments) == 0:
		raise EmptyTimeline("timeline has no duration")
	if not any(len(segment.placements) > 0 for segment in segments):
		raise EmptyTimeline("no source is present anywhere on the timeline")
	utils.log(f"reconciled {len(events)} events into {len(segments)} segments")
	return segments

#============================================

def edl_summary(segments: list) -> list:
	summary = []
	for segment in segments:
		summary.append({
			'start': segment.start_ms,
			'end': segment.end_ms,
			'sources': [
				{'source': placement.source_id, 'offset': placement.offset_ms}
				for placement in segment.placements
			],
		})
	return summary
