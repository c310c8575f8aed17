#!/usr/bin/env python3

from camgridlib.core import models
from camgridlib.core.errors import InvalidInterval

#============================================

def validate_interval(source_id: str, interval: models.PresenceInterval) -> None:
	if interval.begin_ms < 0:
		raise InvalidInterval(
			f"source {source_id} has negative interval begin {interval.begin_ms}"
		)
	if interval.duration_ms < 0:
		raise InvalidInterval(
			f"source {source_id} has negative interval duration {interval.duration_ms}"
		)

#============================================

def build_events(sources: list) -> list:
	"""
	Turn every presence interval into a Start and a Stop event.

	Events are ordered by timestamp, then Stop before Start, then by the
	order the sources and intervals were supplied in.
	"""
	events = []
	for source_index, source in enumerate(sources):
		for interval_index, interval in enumerate(source.intervals):
			validate_interval(source.source_id, interval)
			order = (source_index, interval_index)
			events.append(models.TimelineEvent(interval.begin_ms, models.START,
				source.source_id, order))
			events.append(models.TimelineEvent(interval.end_ms, models.STOP,
				source.source_id, order))
	events.sort(key=lambda event: event.sort_key())
	return events

#============================================

def group_events(events: list) -> list:
	"""
	Group sorted events sharing a timestamp: [(timestamp, [events...]), ...].
	"""
	groups = []
	for event in sorted(events, key=lambda item: item.sort_key()):
		if len(groups) > 0 and groups[-1][0] == event.timestamp_ms:
			groups[-1][1].append(event)
			continue
		groups.append((event.timestamp_ms, [event]))
	return groups
