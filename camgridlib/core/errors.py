#!/usr/bin/env python3

"""
Data errors raised while planning a composite.

All of them derive from RuntimeError so callers that already trap
RuntimeError for configuration problems keep working.
"""

#============================================

class CamgridError(RuntimeError):
	pass

#============================================

class InvalidInterval(CamgridError):
	"""A presence interval or timeline bound is negative or reversed."""

#============================================

class EmptyTimeline(CamgridError):
	"""No source is ever present; downstream steps should be skipped."""

#============================================

class DegenerateLayout(CamgridError):
	"""No grid yields positive tile dimensions for the canvas."""

	def __init__(self, message: str, source_count: int = 0):
		super().__init__(message)
		self.source_count = source_count

#============================================

class UnresolvedSource(CamgridError):
	"""An event names a source missing from the source list."""

	def __init__(self, source_id: str):
		super().__init__(f"event references unknown source: {source_id}")
		self.source_id = source_id
